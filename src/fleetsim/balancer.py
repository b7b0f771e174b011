"""Status balancing toward an even split of the fleet."""

from __future__ import annotations

import logging

from fleetsim.config import FleetConfig
from fleetsim.generator import CarGenerator
from fleetsim.models.car import STATUS_CYCLE, Car, CarStatus
from fleetsim.persistence import persist_car
from fleetsim.seed.base import SeedSource
from fleetsim.store.base import CarStore

_logger = logging.getLogger(__name__)


def count_statuses(cars: list[Car]) -> dict[CarStatus, int]:
    counts = dict.fromkeys(STATUS_CYCLE, 0)
    for car in cars:
        counts[car.status] += 1
    return counts


class StatusBalancer:
    """Moves cars out of over-full statuses into under-full ones.

    One pass over the fleet is enough: every move takes a car from a
    status above ``cars_per_status`` to one below it, so the excess only
    shrinks, and once no status is below target nothing else can move.
    """

    def __init__(
        self,
        config: FleetConfig,
        store: CarStore,
        seed: SeedSource,
        generator: CarGenerator,
    ) -> None:
        self._config = config
        self._store = store
        self._seed = seed
        self._generator = generator

    def _needed_status(self, counts: dict[CarStatus, int]) -> CarStatus | None:
        target = self._config.cars_per_status
        for status in STATUS_CYCLE:
            if counts[status] < target:
                return status
        return None

    async def balance(self) -> list[Car]:
        """Rebalance statuses and return the cars that were moved."""
        cars = await self._store.find()
        counts = count_statuses(cars)
        target = self._config.cars_per_status

        moved: list[Car] = []
        for car in cars:
            if counts[car.status] <= target:
                continue
            needed = self._needed_status(counts)
            if needed is None:
                continue

            counts[car.status] -= 1
            counts[needed] += 1
            updated = car.evolve(
                status=needed,
                speed=self._generator.speed_for(needed),
                timestamp=self._generator.now(),
            )
            _logger.debug("Rebalancing car %s: %s -> %s", car.id, car.status, needed)
            await persist_car(self._store, self._seed, updated)
            moved.append(updated)

        if moved:
            _logger.info(
                "Rebalanced %d cars (%s)",
                len(moved),
                ", ".join(f"{status}: {count}" for status, count in counts.items()),
            )
        return moved
