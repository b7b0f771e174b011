"""No-op seed source used when no remote mirror is configured."""

from __future__ import annotations

from fleetsim.models.car import Car, CarCreate


class LocalSeedSource:
    """Seed source that holds nothing and accepts everything.

    ``list`` is always empty and writes echo their input back, so the
    store stays the only copy of the fleet and assigns every id.
    """

    async def list(self) -> list[Car]:
        return []

    async def create(self, draft: CarCreate) -> CarCreate:
        return draft

    async def update(self, car_id: str, car: Car) -> Car:
        return car
