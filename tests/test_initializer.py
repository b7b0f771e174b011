from __future__ import annotations

import itertools
import random
from collections import Counter
from datetime import UTC, datetime

import pytest

from fleetsim.balancer import StatusBalancer
from fleetsim.config import FleetConfig
from fleetsim.exceptions import SeedSourceUnavailableError
from fleetsim.generator import CarGenerator
from fleetsim.initializer import FleetInitializer
from fleetsim.models.car import Car, CarCreate, CarStatus
from fleetsim.store.memory import InMemoryCarStore


def _clock() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


class _FakeSeed:
    """In-process stand-in for the remote mock API."""

    def __init__(
        self,
        cars: list[Car] | None = None,
        *,
        list_error: bool = False,
        create_error: bool = False,
    ) -> None:
        self.cars = list(cars or [])
        self.list_error = list_error
        self.create_error = create_error
        self.created: list[CarCreate] = []
        self.updated: list[str] = []

    async def list(self) -> list[Car]:
        if self.list_error:
            raise SeedSourceUnavailableError("connection refused", url="http://mock/cars")
        return list(self.cars)

    async def create(self, draft: CarCreate) -> CarCreate:
        if self.create_error:
            raise SeedSourceUnavailableError("HTTP 500", status_code=500)
        self.created.append(draft)
        return draft.model_copy(update={"id": f"remote-{len(self.created)}"})

    async def update(self, car_id: str, car: Car) -> Car:
        self.updated.append(car_id)
        return car


def _store() -> InMemoryCarStore:
    counter = itertools.count(1)
    return InMemoryCarStore(id_factory=lambda: f"uuid-{next(counter)}")


def _initializer(store: InMemoryCarStore, seed: object, **config: object) -> FleetInitializer:
    cfg = FleetConfig(**config)  # type: ignore[arg-type]
    generator = CarGenerator(cfg, rng=random.Random(11), clock=_clock)
    balancer = StatusBalancer(cfg, store, seed, generator)  # type: ignore[arg-type]
    return FleetInitializer(cfg, store, seed, generator, balancer)  # type: ignore[arg-type]


def _distribution(cars: list[Car]) -> Counter[CarStatus]:
    return Counter(car.status for car in cars)


def _assert_speed_invariant(cars: list[Car]) -> None:
    for car in cars:
        if car.status is CarStatus.MOVING:
            assert 30 <= car.speed <= 89
        else:
            assert car.speed == 0


def _remote_car(car_id: str, status: str, speed: int = 0) -> Car:
    return Car(
        id=car_id,
        name=f"Remote {car_id}",
        latitude=-1.9,
        longitude=30.1,
        speed=speed,
        status=status,  # type: ignore[arg-type]
        timestamp="2025-12-31T00:00:00.000Z",
    )


@pytest.mark.asyncio
async def test_empty_store_gets_even_fleet() -> None:
    store = _store()
    seed = _FakeSeed()

    await _initializer(store, seed).initialize()

    cars = await store.find()
    assert len(cars) == 15
    assert _distribution(cars) == {CarStatus.MOVING: 5, CarStatus.STOPPED: 5, CarStatus.IDLE: 5}
    _assert_speed_invariant(cars)
    assert [car.name for car in cars] == [f"Car {chr(65 + i)}" for i in range(15)]
    assert [car.id for car in cars] == [f"remote-{i}" for i in range(1, 16)]


@pytest.mark.asyncio
async def test_initialize_is_idempotent() -> None:
    store = _store()
    initializer = _initializer(store, _FakeSeed())

    await initializer.initialize()
    first = await store.find()
    await initializer.initialize()

    assert await store.find() == first


@pytest.mark.asyncio
async def test_partial_store_is_topped_up_and_balanced() -> None:
    store = _store()
    for i in range(4):
        await store.create(
            {"name": f"Old {i}", "latitude": 0.0, "longitude": 0.0, "speed": 40, "status": "Moving"}
        )

    await _initializer(store, _FakeSeed()).initialize()

    cars = await store.find()
    assert len(cars) == 15
    assert _distribution(cars) == {CarStatus.MOVING: 5, CarStatus.STOPPED: 5, CarStatus.IDLE: 5}
    _assert_speed_invariant(cars)
    # Names continue after the cars already in the store.
    assert cars[4].name == "Car E"


@pytest.mark.asyncio
async def test_remote_cars_are_reconciled_into_store() -> None:
    store = _store()
    seed = _FakeSeed([_remote_car("a", "Moving", 55), _remote_car("b", "Idle")])

    await _initializer(store, seed).initialize()

    assert await store.find_by_id("a") is not None
    assert await store.find_by_id("b") is not None
    assert await store.count() == 15
    assert len(seed.created) == 13


@pytest.mark.asyncio
async def test_create_failure_falls_back_to_local_sequential_ids() -> None:
    store = _store()
    seed = _FakeSeed(create_error=True)

    await _initializer(store, seed).initialize()

    cars = await store.find()
    assert [car.id for car in cars] == [str(i) for i in range(1, 16)]


@pytest.mark.asyncio
async def test_local_ids_skip_ids_already_in_use() -> None:
    store = _store()
    await store.create({"id": "2", "name": "Taken", "latitude": 0.0, "longitude": 0.0, "status": "Idle"})

    await _initializer(store, _FakeSeed(create_error=True), target_car_count=4).initialize()

    assert sorted(car.id for car in await store.find()) == ["2", "3", "4", "5"]


@pytest.mark.asyncio
async def test_unreachable_seed_source_triggers_full_regeneration() -> None:
    store = _store()
    await store.create({"name": "Stale", "latitude": 5.0, "longitude": 5.0, "status": "Moving", "speed": 70})
    seed = _FakeSeed(list_error=True, create_error=True)

    await _initializer(store, seed).initialize()

    cars = await store.find()
    assert len(cars) == 15
    assert all(car.name != "Stale" for car in cars)
    assert [car.id for car in cars] == [str(i) for i in range(1, 16)]
    assert [car.status for car in cars] == (
        [CarStatus.MOVING] * 5 + [CarStatus.STOPPED] * 5 + [CarStatus.IDLE] * 5
    )
    _assert_speed_invariant(cars)


@pytest.mark.asyncio
async def test_regeneration_uses_seed_ids_when_create_works() -> None:
    store = _store()
    seed = _FakeSeed(list_error=True)

    await _initializer(store, seed, target_car_count=6).initialize()

    cars = await store.find()
    assert [car.id for car in cars] == [f"remote-{i}" for i in range(1, 7)]
    assert _distribution(cars) == {CarStatus.MOVING: 2, CarStatus.STOPPED: 2, CarStatus.IDLE: 2}


@pytest.mark.asyncio
async def test_seed_id_clash_gets_fresh_store_id() -> None:
    store = _store()
    await store.create({"id": "remote-1", "name": "Existing", "latitude": 0.0, "longitude": 0.0})

    await _initializer(store, _FakeSeed(), target_car_count=3).initialize()

    ids = [car.id for car in await store.find()]
    assert len(ids) == 3
    assert ids[0] == "remote-1"
    assert "uuid-1" in ids
