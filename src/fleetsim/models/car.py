"""Car model and status enum.

:class:`Car` is the only entity in the fleet.  It is frozen; changes
go through :meth:`Car.evolve`, which re-runs validation so the
speed/status invariant holds for every record that reaches a store:

* ``speed`` is a non-negative integer
* ``speed`` is ``0`` whenever ``status`` is not :attr:`CarStatus.MOVING`
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fleetsim._constants import format_timestamp
from fleetsim._normalize import safe_float, safe_int, safe_str


class CarStatus(StrEnum):
    """Closed set of car statuses.

    Lookup is case-insensitive (``CarStatus("moving") is CarStatus.MOVING``);
    anything else raises :class:`ValueError`.
    """

    MOVING = "Moving"
    STOPPED = "Stopped"
    IDLE = "Idle"

    @classmethod
    def _missing_(cls, value: object) -> CarStatus | None:
        if not isinstance(value, str):
            return None
        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        return None


#: Order used for status cycling during generation and for balancing.
STATUS_CYCLE: tuple[CarStatus, ...] = (CarStatus.MOVING, CarStatus.STOPPED, CarStatus.IDLE)


def _coerce_status(value: Any) -> Any:
    if value is None or isinstance(value, CarStatus):
        return value
    return CarStatus(value)


def _coerce_coordinate(value: Any) -> Any:
    if isinstance(value, (str, float)):
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError(f"not a coordinate: {value!r}")
        return parsed
    return value


def _coerce_speed(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (str, float)):
        parsed = safe_int(value)
        if parsed is None:
            raise ValueError(f"not a whole, finite speed: {value!r}")
        return parsed
    return value


def _coerce_timestamp(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


class _CarFieldsBase(BaseModel):
    """Shared input coercion for car payloads."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )

    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        return _coerce_status(value)

    @field_validator("latitude", "longitude", mode="before", check_fields=False)
    @classmethod
    def _normalize_coordinates(cls, value: Any) -> Any:
        return _coerce_coordinate(value)

    @field_validator("speed", mode="before", check_fields=False)
    @classmethod
    def _normalize_speed(cls, value: Any) -> Any:
        return _coerce_speed(value)

    @field_validator("timestamp", mode="before", check_fields=False)
    @classmethod
    def _normalize_timestamp(cls, value: Any) -> Any:
        return _coerce_timestamp(value)


class Car(_CarFieldsBase):
    """A tracked vehicle.

    Parameters
    ----------
    id : str
        Opaque unique identifier assigned by the store (or the seed source).
    name : str
        Display label, e.g. ``"Car A"``.
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    speed : int
        Non-negative speed; always ``0`` unless moving.
    status : CarStatus
        One of ``Moving``, ``Stopped`` or ``Idle``.
    timestamp : str or None
        Last-modified time as an ISO-8601 UTC string.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )

    id: str
    name: str
    latitude: float
    longitude: float
    speed: int = Field(default=0, ge=0)
    status: CarStatus = CarStatus.STOPPED
    timestamp: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str:
        car_id = safe_str(value)
        if car_id is None:
            raise ValueError("id must be non-empty")
        return car_id

    @model_validator(mode="after")
    def _enforce_speed_invariant(self) -> Car:
        if self.status is not CarStatus.MOVING and self.speed != 0:
            object.__setattr__(self, "speed", 0)
        return self

    @property
    def is_moving(self) -> bool:
        return self.status is CarStatus.MOVING

    def evolve(self, **changes: Any) -> Car:
        """Return a validated copy with *changes* applied.

        Unlike ``model_copy(update=...)`` this re-runs every validator,
        so a status change away from ``Moving`` zeroes the speed.
        """
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)


class CarCreate(_CarFieldsBase):
    """Payload accepted when creating a car.

    ``id`` and ``timestamp`` are optional; the store assigns an id and
    the service stamps the current time when they are missing.
    """

    id: str | None = None
    name: str
    latitude: float
    longitude: float
    speed: int = Field(default=0, ge=0)
    status: CarStatus = CarStatus.STOPPED
    timestamp: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str | None:
        return safe_str(value)


class CarUpdate(_CarFieldsBase):
    """Partial payload accepted when updating a car.

    Only fields the caller actually sent are applied; see
    :meth:`changes`.  ``id`` is not part of the model, so an ``id`` in
    the payload is silently ignored.
    """

    name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    speed: int | None = Field(default=None, ge=0)
    status: CarStatus | None = None
    timestamp: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class StatusCount(BaseModel):
    """Number of cars currently holding ``status``."""

    model_config = ConfigDict(frozen=True)

    status: CarStatus
    count: int = 0
