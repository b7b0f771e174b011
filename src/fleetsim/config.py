"""Service configuration for fleetsim."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from fleetsim._constants import (
    DEFAULT_MAX_SPEED,
    DEFAULT_MIN_SPEED,
    DEFAULT_ORIGIN_LATITUDE,
    DEFAULT_ORIGIN_LONGITUDE,
    DEFAULT_SEED_TIMEOUT,
    DEFAULT_SPREAD,
    DEFAULT_TARGET_CAR_COUNT,
    DEFAULT_UPDATE_INTERVAL,
)
from fleetsim.exceptions import FleetConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, raw: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(raw)
    except ValueError as exc:
        raise FleetConfigError(f"{env_key} must be a {kind.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class FleetConfig:
    """Service configuration.

    Parameters
    ----------
    target_car_count : int
        Fleet size the initializer fills the store up to.
    update_interval : float
        Seconds between position-update ticks.
    seed_url : str or None
        Base URL of a mock REST API mirroring the fleet
        (``GET``/``POST`` on the URL, ``PUT`` on ``<url>/<id>``).
        ``None`` keeps everything local.
    seed_timeout : float
        Total timeout in seconds for one seed source request.
    origin_latitude : float
        South edge of the box synthetic cars are placed in.
    origin_longitude : float
        West edge of the box synthetic cars are placed in.
    spread : float
        Size of the placement box in degrees.
    min_speed : int
        Lowest speed rolled for a moving car.
    max_speed : int
        Highest speed rolled for a moving car (inclusive).
    scheduler_enabled : bool
        Run the periodic position updater.
    host : str
        Interface the HTTP API binds to.
    port : int
        Port the HTTP API listens on.
    log_level : str
        Root log level used by the command line entry point.
    """

    target_car_count: int = DEFAULT_TARGET_CAR_COUNT
    update_interval: float = DEFAULT_UPDATE_INTERVAL
    seed_url: str | None = None
    seed_timeout: float = DEFAULT_SEED_TIMEOUT
    origin_latitude: float = DEFAULT_ORIGIN_LATITUDE
    origin_longitude: float = DEFAULT_ORIGIN_LONGITUDE
    spread: float = DEFAULT_SPREAD
    min_speed: int = DEFAULT_MIN_SPEED
    max_speed: int = DEFAULT_MAX_SPEED
    scheduler_enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.target_car_count < 0:
            raise FleetConfigError(f"target_car_count must be >= 0, got {self.target_car_count}")
        if self.update_interval <= 0:
            raise FleetConfigError(f"update_interval must be > 0, got {self.update_interval}")
        if self.seed_timeout <= 0:
            raise FleetConfigError(f"seed_timeout must be > 0, got {self.seed_timeout}")
        if self.spread < 0:
            raise FleetConfigError(f"spread must be >= 0, got {self.spread}")
        if not 0 <= self.min_speed <= self.max_speed:
            raise FleetConfigError(
                f"speed range must satisfy 0 <= min_speed <= max_speed, got {self.min_speed}..{self.max_speed}"
            )
        if self.seed_url is not None and not self.seed_url.strip():
            object.__setattr__(self, "seed_url", None)

    @property
    def cars_per_status(self) -> int:
        """Even-split target per status (rounded down)."""
        return self.target_car_count // 3

    @classmethod
    def from_env(cls, **overrides: Any) -> FleetConfig:
        """Create configuration from ``FLEET_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FleetConfig
            Populated configuration.

        Raises
        ------
        FleetConfigError
            A numeric variable could not be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "FLEET_SEED_URL": "seed_url",
            "FLEET_HOST": "host",
            "FLEET_LOG_LEVEL": "log_level",
        }
        _ENV_INT_MAP = {
            "FLEET_TARGET_CAR_COUNT": "target_car_count",
            "FLEET_MIN_SPEED": "min_speed",
            "FLEET_MAX_SPEED": "max_speed",
            "FLEET_PORT": "port",
        }
        _ENV_FLOAT_MAP = {
            "FLEET_UPDATE_INTERVAL": "update_interval",
            "FLEET_SEED_TIMEOUT": "seed_timeout",
            "FLEET_ORIGIN_LATITUDE": "origin_latitude",
            "FLEET_ORIGIN_LONGITUDE": "origin_longitude",
            "FLEET_SPREAD": "spread",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, int)
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, float)

        if "scheduler_enabled" not in overrides:
            config_kwargs["scheduler_enabled"] = _env_bool(env.get("FLEET_SCHEDULER_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
