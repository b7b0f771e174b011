"""Random-walk position updates for moving cars."""

from __future__ import annotations

import asyncio
import logging
import math
import random

from fleetsim._constants import COORDINATE_PRECISION, DISTANCE_PER_SPEED_UNIT, FULL_TURN, SPEED_DIVISOR
from fleetsim.generator import CarGenerator
from fleetsim.initializer import FleetInitializer
from fleetsim.models.car import Car, CarStatus
from fleetsim.persistence import persist_car
from fleetsim.seed.base import SeedSource
from fleetsim.store.base import CarStore

_logger = logging.getLogger(__name__)


def step_distance(speed: int) -> float:
    """Length of one random-walk step in degrees: ``speed / 10 * 0.001``."""
    return (speed / SPEED_DIVISOR) * DISTANCE_PER_SPEED_UNIT


def random_walk_step(latitude: float, longitude: float, speed: int, angle: float) -> tuple[float, float]:
    """Move ``(latitude, longitude)`` by :func:`step_distance` in direction *angle* (radians).

    Both coordinates are rounded to six decimals.
    """
    distance = step_distance(speed)
    new_latitude = round(latitude + math.sin(angle) * distance, COORDINATE_PRECISION)
    new_longitude = round(longitude + math.cos(angle) * distance, COORDINATE_PRECISION)
    return new_latitude, new_longitude


class PositionUpdater:
    """Advances every moving car by one random-walk step per tick.

    Stopped and idle cars are never selected, so their position and
    timestamp stay untouched.  Status is never changed here.
    """

    def __init__(
        self,
        store: CarStore,
        seed: SeedSource,
        generator: CarGenerator,
        initializer: FleetInitializer,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._seed = seed
        self._generator = generator
        self._initializer = initializer
        self._rng = rng if rng is not None else generator.rng

    def _advance(self, car: Car) -> Car:
        angle = self._rng.random() * FULL_TURN
        latitude, longitude = random_walk_step(car.latitude, car.longitude, car.speed, angle)
        return car.evolve(latitude=latitude, longitude=longitude, timestamp=self._generator.now())

    async def _move(self, car: Car) -> Car:
        updated = self._advance(car)
        await persist_car(self._store, self._seed, updated)
        return updated

    async def tick(self) -> list[Car]:
        """Run one update; re-initializes the fleet instead when the store is empty.

        Returns the moved cars (empty after a re-initialization).
        """
        if await self._store.count() == 0:
            _logger.info("No cars in store; re-initializing fleet")
            await self._initializer.initialize()
            return []

        moving = await self._store.find(status=CarStatus.MOVING)
        _logger.debug("Updating positions of %d moving cars", len(moving))
        updated = await asyncio.gather(*(self._move(car) for car in moving))
        _logger.info("Car positions updated")
        return list(updated)
