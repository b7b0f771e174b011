"""High-level async fleet service."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from typing import Any

import aiohttp

from fleetsim._constants import Clock, utcnow
from fleetsim.balancer import StatusBalancer, count_statuses
from fleetsim.config import FleetConfig
from fleetsim.exceptions import CarNotFoundError, FleetError
from fleetsim.generator import CarGenerator
from fleetsim.initializer import FleetInitializer
from fleetsim.models.car import Car, CarCreate, CarUpdate, StatusCount
from fleetsim.scheduler import IntervalScheduler
from fleetsim.seed.base import SeedSource
from fleetsim.seed.local import LocalSeedSource
from fleetsim.seed.remote import MockApiSeedSource
from fleetsim.store.base import CarStore
from fleetsim.store.memory import InMemoryCarStore
from fleetsim.updater import PositionUpdater

_logger = logging.getLogger(__name__)


class FleetService:
    """Owns the fleet and its background position updates.

    Usage::

        async with FleetService(config) as fleet:
            await fleet.start()
            cars = await fleet.get_all()

    The seed source is picked from ``config.seed_url`` unless one is
    passed in: a URL means :class:`MockApiSeedSource` on an aiohttp
    session (created and closed here unless *session* is given), no URL
    means :class:`LocalSeedSource`.
    """

    def __init__(
        self,
        config: FleetConfig | None = None,
        *,
        store: CarStore | None = None,
        seed: SeedSource | None = None,
        session: aiohttp.ClientSession | None = None,
        rng: random.Random | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._config = config if config is not None else FleetConfig()
        self._store: CarStore = store if store is not None else InMemoryCarStore()
        self._seed = seed
        self._external_session = session is not None
        self._http_session = session
        self._generator = CarGenerator(self._config, rng=rng, clock=clock)
        self._initializer: FleetInitializer | None = None
        self._updater: PositionUpdater | None = None
        self._scheduler: IntervalScheduler | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetService:
        if self._seed is None:
            self._seed = self._build_seed()
        balancer = StatusBalancer(self._config, self._store, self._seed, self._generator)
        self._initializer = FleetInitializer(self._config, self._store, self._seed, self._generator, balancer)
        self._updater = PositionUpdater(self._store, self._seed, self._generator, self._initializer)
        self._scheduler = IntervalScheduler(self._updater.tick, self._config.update_interval)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._scheduler is not None:
            await self._scheduler.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._initializer = None
        self._updater = None
        self._scheduler = None

    def _build_seed(self) -> SeedSource:
        if not self._config.seed_url:
            return LocalSeedSource()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        _logger.info("Mirroring fleet to %s", self._config.seed_url)
        return MockApiSeedSource(self._config.seed_url, self._http_session, timeout=self._config.seed_timeout)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_initializer(self) -> FleetInitializer:
        if self._initializer is None:
            raise FleetError("Service not started. Use 'async with FleetService(...) as fleet:'")
        return self._initializer

    def _require_scheduler(self) -> IntervalScheduler:
        if self._scheduler is None:
            raise FleetError("Service not started. Use 'async with FleetService(...) as fleet:'")
        return self._scheduler

    @property
    def config(self) -> FleetConfig:
        return self._config

    @property
    def store(self) -> CarStore:
        return self._store

    @property
    def scheduler(self) -> IntervalScheduler:
        return self._require_scheduler()

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Initialize the fleet, then start the position updater if enabled."""
        await self.initialize()
        if self._config.scheduler_enabled:
            self._require_scheduler().start()

    async def initialize(self) -> None:
        await self._require_initializer().initialize()

    async def tick(self) -> bool:
        """Run one position update now (skipped if a tick is in flight)."""
        return await self._require_scheduler().run_once()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def get_all(self) -> list[Car]:
        return await self._store.find()

    async def get_by_id(self, car_id: str) -> Car:
        """Return the car with *car_id* or raise :class:`CarNotFoundError`."""
        car = await self._store.find_by_id(car_id)
        if car is None:
            raise CarNotFoundError(car_id)
        return car

    async def create(self, data: Mapping[str, Any] | CarCreate) -> Car:
        """Validate and store a new car; id and timestamp are filled in when absent."""
        payload = data if isinstance(data, CarCreate) else CarCreate.model_validate(data)
        fields = payload.model_dump(exclude_none=True)
        fields.setdefault("timestamp", self._generator.now())
        car = await self._store.create(fields)
        _logger.info("Created car %s (%s)", car.id, car.name)
        return car

    async def update(self, car_id: str, data: Mapping[str, Any] | CarUpdate) -> Car:
        """Merge *data* over the stored car.

        The timestamp is refreshed unless the caller sends one, and a car
        that ends up not moving gets speed ``0``.
        """
        existing = await self.get_by_id(car_id)
        payload = data if isinstance(data, CarUpdate) else CarUpdate.model_validate(data)
        changes = payload.changes()
        changes.setdefault("timestamp", self._generator.now())
        updated = existing.evolve(**changes)
        if await self._store.replace(updated) is None:
            raise CarNotFoundError(car_id)
        _logger.debug("Updated car %s fields=%s", car_id, sorted(changes))
        return updated

    async def delete(self, car_id: str) -> bool:
        car = await self.get_by_id(car_id)
        await self._store.remove(car)
        _logger.info("Deleted car %s", car_id)
        return True

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    async def status_distribution(self) -> list[StatusCount]:
        counts = count_statuses(await self._store.find())
        return [StatusCount(status=status, count=count) for status, count in counts.items()]

    async def summary(self) -> str:
        distribution = await self.status_distribution()
        total = sum(item.count for item in distribution)
        parts = ", ".join(f"{item.status}: {item.count}" for item in distribution)
        return f"Car tracker: tracking {total} vehicles ({parts})"
