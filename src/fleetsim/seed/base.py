"""Structural seed source interface."""

from __future__ import annotations

from typing import Protocol

from fleetsim.models.car import Car, CarCreate


class SeedSource(Protocol):
    """Optional remote copy of the fleet.

    Implementations raise
    :class:`~fleetsim.exceptions.SeedSourceUnavailableError` for any
    failure; callers never inspect reachability themselves.
    """

    async def list(self) -> list[Car]:
        ...

    async def create(self, draft: CarCreate) -> CarCreate:
        """Mirror a new car and return the source's copy.

        The returned draft carries the source's id when it assigns one;
        an ``id`` of ``None`` leaves id assignment to the store.
        """
        ...

    async def update(self, car_id: str, car: Car) -> Car:
        ...
