"""Internal constants shared across the library."""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import UTC, datetime

DEFAULT_TARGET_CAR_COUNT = 15
DEFAULT_UPDATE_INTERVAL = 5.0
DEFAULT_SEED_TIMEOUT = 10.0

# ------------------------------------------------------------------
# Synthetic fleet bounding box (south-west corner + spread in degrees)
# ------------------------------------------------------------------

DEFAULT_ORIGIN_LATITUDE = -1.94
DEFAULT_ORIGIN_LONGITUDE = 30.05
DEFAULT_SPREAD = 0.1

# Inclusive speed range for cars placed into the Moving status.
DEFAULT_MIN_SPEED = 30
DEFAULT_MAX_SPEED = 89

# ------------------------------------------------------------------
# Random walk
# ------------------------------------------------------------------

SPEED_DIVISOR = 10.0
DISTANCE_PER_SPEED_UNIT = 0.001
COORDINATE_PRECISION = 6
FULL_TURN = 2 * math.pi

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    """Render *value* as an ISO-8601 UTC string with millisecond precision.

    Naive datetimes are taken to be UTC.  Output looks like
    ``2026-01-01T08:30:00.000Z``.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")

