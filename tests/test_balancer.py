from __future__ import annotations

import itertools
import random
from collections import Counter
from datetime import UTC, datetime

import pytest

from fleetsim.balancer import StatusBalancer, count_statuses
from fleetsim.config import FleetConfig
from fleetsim.exceptions import PersistenceError, SeedSourceUnavailableError
from fleetsim.generator import CarGenerator
from fleetsim.models.car import Car, CarStatus
from fleetsim.seed.local import LocalSeedSource
from fleetsim.store.memory import InMemoryCarStore


def _clock() -> datetime:
    return datetime(2026, 1, 1, 12, tzinfo=UTC)


class _FailingWriteStore(InMemoryCarStore):
    def __init__(self, failing_ids: set[str]) -> None:
        counter = itertools.count(1)
        super().__init__(id_factory=lambda: str(next(counter)))
        self.failing_ids = failing_ids

    async def replace(self, car: Car) -> Car | None:
        if car.id in self.failing_ids:
            raise PersistenceError("disk full", car_id=car.id)
        return await super().replace(car)


class _UnreachableSeed(LocalSeedSource):
    def __init__(self) -> None:
        self.update_calls = 0

    async def update(self, car_id: str, car: Car) -> Car:
        self.update_calls += 1
        raise SeedSourceUnavailableError("mirror down")


async def _fill(store: InMemoryCarStore, statuses: list[CarStatus]) -> None:
    for i, status in enumerate(statuses):
        await store.create(
            {
                "name": f"Car {i}",
                "latitude": 0.0,
                "longitude": 0.0,
                "speed": 50 if status is CarStatus.MOVING else 0,
                "status": status,
                "timestamp": "2020-01-01T00:00:00.000Z",
            }
        )


def _balancer(store: InMemoryCarStore, seed: LocalSeedSource | None = None, **config: object) -> StatusBalancer:
    cfg = FleetConfig(**config)  # type: ignore[arg-type]
    generator = CarGenerator(cfg, rng=random.Random(3), clock=_clock)
    return StatusBalancer(cfg, store, seed or LocalSeedSource(), generator)


def _counts(cars: list[Car]) -> dict[CarStatus, int]:
    return count_statuses(cars)


@pytest.mark.asyncio
async def test_all_moving_fleet_is_split_evenly() -> None:
    store = _FailingWriteStore(set())
    await _fill(store, [CarStatus.MOVING] * 15)

    moved = await _balancer(store).balance()

    assert len(moved) == 10
    cars = await store.find()
    assert _counts(cars) == {CarStatus.MOVING: 5, CarStatus.STOPPED: 5, CarStatus.IDLE: 5}
    # First over-target cars go to the first status below target.
    assert [car.status for car in cars[:10]] == [CarStatus.STOPPED] * 5 + [CarStatus.IDLE] * 5


@pytest.mark.asyncio
async def test_moved_cars_respect_speed_rule_and_get_new_timestamp() -> None:
    store = _FailingWriteStore(set())
    await _fill(store, [CarStatus.IDLE] * 9)

    moved = await _balancer(store, target_car_count=9).balance()

    for car in moved:
        assert car.timestamp == "2026-01-01T12:00:00.000Z"
        if car.status is CarStatus.MOVING:
            assert 30 <= car.speed <= 89
        else:
            assert car.speed == 0
    for car in await store.find():
        if car.status is not CarStatus.MOVING:
            assert car.speed == 0


@pytest.mark.asyncio
async def test_balance_is_idempotent() -> None:
    store = _FailingWriteStore(set())
    await _fill(store, [CarStatus.MOVING] * 8 + [CarStatus.STOPPED] * 4 + [CarStatus.IDLE] * 3)
    balancer = _balancer(store)

    await balancer.balance()
    before = await store.find()
    second = await balancer.balance()

    assert second == []
    assert await store.find() == before


@pytest.mark.asyncio
async def test_oversized_fleet_stops_when_nothing_is_below_target() -> None:
    store = _FailingWriteStore(set())
    await _fill(store, [CarStatus.MOVING] * 8 + [CarStatus.STOPPED] * 5 + [CarStatus.IDLE] * 5)

    moved = await _balancer(store).balance()

    assert moved == []
    assert Counter(car.status for car in await store.find())[CarStatus.MOVING] == 8


@pytest.mark.asyncio
async def test_persist_failure_does_not_abort_pass() -> None:
    store = _FailingWriteStore({"1"})
    await _fill(store, [CarStatus.MOVING] * 15)

    moved = await _balancer(store).balance()

    # The intended update is still reported for the failed car.
    assert len(moved) == 10
    assert moved[0].id == "1"
    assert moved[0].status is CarStatus.STOPPED
    stored = await store.find_by_id("1")
    assert stored is not None
    assert stored.status is CarStatus.MOVING
    assert _counts(await store.find())[CarStatus.IDLE] == 5


@pytest.mark.asyncio
async def test_mirror_failure_keeps_local_write() -> None:
    store = _FailingWriteStore(set())
    seed = _UnreachableSeed()
    await _fill(store, [CarStatus.STOPPED] * 6)

    moved = await _balancer(store, seed, target_car_count=6).balance()

    assert len(moved) == 4
    assert seed.update_calls == 4
    assert _counts(await store.find()) == {CarStatus.MOVING: 2, CarStatus.STOPPED: 2, CarStatus.IDLE: 2}
