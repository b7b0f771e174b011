"""In-memory car store.

Process-wide fleet state with an explicit lifecycle: create one instance
per service, call :meth:`InMemoryCarStore.clear` to tear it down.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from fleetsim.exceptions import PersistenceError
from fleetsim.models.car import Car, CarStatus

_logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryCarStore:
    """Dict-backed store keyed by car id.

    Each operation holds an :class:`asyncio.Lock` for its duration, so a
    scheduled tick and an API request never interleave inside one write.
    No lock is held across operations.
    """

    def __init__(self, *, id_factory: Callable[[], str] = _new_id) -> None:
        self._id_factory = id_factory
        self._cars: dict[str, Car] = {}
        self._lock = asyncio.Lock()

    async def count(self) -> int:
        async with self._lock:
            return len(self._cars)

    async def find(self, status: CarStatus | None = None) -> list[Car]:
        async with self._lock:
            if status is None:
                return list(self._cars.values())
            return [car for car in self._cars.values() if car.status is status]

    async def find_by_id(self, car_id: str) -> Car | None:
        async with self._lock:
            return self._cars.get(car_id)

    async def create(self, fields: Mapping[str, Any]) -> Car:
        data = dict(fields)
        async with self._lock:
            car_id = data.get("id")
            if car_id is None:
                car_id = self._id_factory()
                data["id"] = car_id
            elif str(car_id) in self._cars:
                raise PersistenceError(f"Car with ID {car_id} already exists", car_id=str(car_id))
            try:
                car = Car.model_validate(data)
            except ValidationError as exc:
                raise PersistenceError(f"Invalid car record: {exc}", car_id=str(car_id)) from exc
            self._cars[car.id] = car
        _logger.debug("Stored new car id=%s name=%s", car.id, car.name)
        return car

    async def save(self, car: Car) -> Car:
        async with self._lock:
            self._cars[car.id] = car
        return car

    async def replace(self, car: Car) -> Car | None:
        async with self._lock:
            if car.id not in self._cars:
                return None
            self._cars[car.id] = car
        return car

    async def remove(self, car: Car) -> None:
        async with self._lock:
            self._cars.pop(car.id, None)

    async def clear(self) -> None:
        async with self._lock:
            self._cars.clear()
