"""Best-effort write of one car to the store and its seed source mirror."""

from __future__ import annotations

import logging

from fleetsim.exceptions import FleetError
from fleetsim.models.car import Car
from fleetsim.seed.base import SeedSource
from fleetsim.store.base import CarStore

_logger = logging.getLogger(__name__)


async def persist_car(store: CarStore, seed: SeedSource, car: Car) -> bool:
    """Write *car* over its stored record, then push it to the mirror.

    Failures are logged, never raised.  Returns ``True`` only when the
    local write succeeded; a failed mirror push does not count against
    it.  Callers keep using *car* either way, so a ``False`` here means
    the returned record was never made durable.

    The write is update-only: a car deleted after the caller read it
    stays deleted and is not pushed to the mirror.
    """
    try:
        stored = await store.replace(car)
    except Exception:
        _logger.exception("Failed to persist car %s", car.id)
        return False
    if stored is None:
        _logger.info("Car %s was removed meanwhile; dropping update", car.id)
        return False

    try:
        await seed.update(car.id, car)
    except FleetError as exc:
        _logger.warning("Failed to update car %s in seed source: %s", car.id, exc)
    return True
