"""Structural store interface used by the fleet components."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from fleetsim.models.car import Car, CarStatus


class CarStore(Protocol):
    """Durable collection of car records.

    Having a protocol here makes it easy to pass test doubles while
    keeping the shipped implementation (`InMemoryCarStore`) concrete.
    Every per-record write must be atomic; last write wins.
    """

    async def count(self) -> int:
        ...

    async def find(self, status: CarStatus | None = None) -> list[Car]:
        """Return cars in insertion order, optionally only those with *status*."""
        ...

    async def find_by_id(self, car_id: str) -> Car | None:
        ...

    async def create(self, fields: Mapping[str, Any]) -> Car:
        """Insert a new car, assigning an id when *fields* carries none."""
        ...

    async def save(self, car: Car) -> Car:
        """Insert or replace *car* by id."""
        ...

    async def replace(self, car: Car) -> Car | None:
        """Replace *car* only if its id is still stored; ``None`` otherwise."""
        ...

    async def remove(self, car: Car) -> None:
        ...

    async def clear(self) -> None:
        ...
