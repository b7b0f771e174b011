"""Synthetic car generation.

Cars are dropped uniformly into a small bounding box and given a letter
name (``Car A`` .. ``Car Z``, then wrapping).  Statuses are spread evenly:

* incremental top-ups cycle ``Moving, Stopped, Idle`` by index
* full regeneration fills contiguous blocks of ``cars_per_status``
"""

from __future__ import annotations

import random

from fleetsim._constants import Clock, format_timestamp, utcnow
from fleetsim.config import FleetConfig
from fleetsim.models.car import STATUS_CYCLE, CarCreate, CarStatus


def car_name(index: int) -> str:
    """Letter-cycling display name: 0 -> ``Car A``, 25 -> ``Car Z``, 26 -> ``Car A``."""
    return f"Car {chr(65 + index % 26)}"


def cycling_status(index: int) -> CarStatus:
    return STATUS_CYCLE[index % len(STATUS_CYCLE)]


def block_status(index: int, cars_per_status: int) -> CarStatus:
    """Status for slot *index* when filling the fleet in even blocks."""
    block = max(cars_per_status, 1)
    return STATUS_CYCLE[(index // block) % len(STATUS_CYCLE)]


class CarGenerator:
    """Builds :class:`CarCreate` drafts for synthetic cars.

    ``rng`` and ``clock`` are injectable so callers (and tests) control
    randomness and time.
    """

    def __init__(
        self,
        config: FleetConfig,
        *,
        rng: random.Random | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._config = config
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock

    @property
    def rng(self) -> random.Random:
        return self._rng

    def now(self) -> str:
        return format_timestamp(self._clock())

    def speed_for(self, status: CarStatus) -> int:
        """Roll a speed for *status*: uniform in the configured range if moving, else 0."""
        if status is not CarStatus.MOVING:
            return 0
        return self._rng.randint(self._config.min_speed, self._config.max_speed)

    def draft(self, name_index: int, status: CarStatus, car_id: str | None = None) -> CarCreate:
        cfg = self._config
        return CarCreate(
            id=car_id,
            name=car_name(name_index),
            latitude=cfg.origin_latitude + self._rng.random() * cfg.spread,
            longitude=cfg.origin_longitude + self._rng.random() * cfg.spread,
            speed=self.speed_for(status),
            status=status,
            timestamp=self.now(),
        )

    def top_up(self, existing_count: int, count: int) -> list[CarCreate]:
        """Drafts for *count* cars added on top of *existing_count* stored ones."""
        return [self.draft(existing_count + i, cycling_status(i)) for i in range(count)]

    def full_fleet(self, total: int | None = None) -> list[CarCreate]:
        """Drafts for a complete fleet with an exact even status split."""
        total = self._config.target_car_count if total is None else total
        per_status = self._config.cars_per_status
        return [self.draft(i, block_status(i, per_status)) for i in range(total)]
