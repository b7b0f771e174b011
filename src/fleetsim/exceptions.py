"""Custom exception hierarchy for fleetsim."""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all fleetsim errors."""


class FleetConfigError(FleetError):
    """Invalid or missing configuration."""


class CarNotFoundError(FleetError):
    """No car with the requested id exists in the store."""

    def __init__(self, car_id: str) -> None:
        self.car_id = car_id
        super().__init__(f"Car with ID {car_id} not found")


class SeedSourceUnavailableError(FleetError):
    """Remote seed source failure (network, non-2xx, invalid payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class PersistenceError(FleetError):
    """A single car record could not be written to the store.

    Raised by store implementations.  The balancer and the position
    updater log it and carry on with the remaining cars.
    """

    def __init__(self, message: str, *, car_id: str | None = None) -> None:
        self.car_id = car_id
        super().__init__(message)
