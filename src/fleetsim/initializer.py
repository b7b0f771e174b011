"""Fleet initialization: reconcile with the seed source, top up, balance."""

from __future__ import annotations

import logging

from fleetsim.balancer import StatusBalancer
from fleetsim.config import FleetConfig
from fleetsim.exceptions import FleetError, SeedSourceUnavailableError
from fleetsim.generator import CarGenerator
from fleetsim.models.car import Car, CarCreate
from fleetsim.seed.base import SeedSource
from fleetsim.store.base import CarStore

_logger = logging.getLogger(__name__)


class FleetInitializer:
    """Makes sure the store holds ``target_car_count`` cars.

    ``initialize`` is idempotent.  The normal path pulls the seed
    source's fleet into the store, generates whatever is missing and
    runs the balancer.  If the seed source cannot be listed, the store
    is wiped and a complete fleet is generated locally instead.
    """

    def __init__(
        self,
        config: FleetConfig,
        store: CarStore,
        seed: SeedSource,
        generator: CarGenerator,
        balancer: StatusBalancer,
    ) -> None:
        self._config = config
        self._store = store
        self._seed = seed
        self._generator = generator
        self._balancer = balancer

    async def initialize(self) -> None:
        try:
            remote_cars = await self._seed.list()
        except SeedSourceUnavailableError as exc:
            _logger.error("Failed to fetch initial car data: %s", exc)
            await self.regenerate()
            return

        for car in remote_cars:
            await self._store.save(car)

        existing = await self._store.count()
        missing = self._config.target_car_count - existing
        if missing > 0:
            await self._top_up(existing, missing)

        _logger.info("Initialized with %d cars", await self._store.count())
        await self._balancer.balance()

    async def regenerate(self) -> None:
        """Discard every stored car and generate a full fleet locally."""
        total = self._config.target_car_count
        _logger.info("Generating all %d cars", total)
        await self._store.clear()

        for i, draft in enumerate(self._generator.full_fleet(total)):
            await self._add(draft, fallback_id=str(i + 1))

        await self._balancer.balance()

    async def _top_up(self, existing: int, missing: int) -> None:
        _logger.info("Generating %d additional cars", missing)
        used_ids = {car.id for car in await self._store.find()}
        next_local = existing + 1

        for draft in self._generator.top_up(existing, missing):
            while str(next_local) in used_ids:
                next_local += 1
            car = await self._add(draft, fallback_id=str(next_local))
            used_ids.add(car.id)

    async def _add(self, draft: CarCreate, *, fallback_id: str) -> Car:
        """Mirror *draft* to the seed source and store it.

        A seed source failure never drops the car: it is stored locally
        under *fallback_id* instead.
        """
        try:
            mirrored = await self._seed.create(draft)
        except SeedSourceUnavailableError as exc:
            _logger.error("Failed to create car in seed source: %s", exc)
            mirrored = draft.model_copy(update={"id": fallback_id})

        try:
            return await self._store.create(mirrored.model_dump(exclude_none=True))
        except FleetError as exc:
            # Id clash with a stored car; let the store pick a fresh one.
            _logger.warning("Could not store car under id %s: %s", mirrored.id, exc)
            fields = mirrored.model_dump(exclude_none=True)
            fields.pop("id", None)
            return await self._store.create(fields)
