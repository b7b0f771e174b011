"""fleetsim - Async simulated vehicle fleet tracker."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fleetsim")
except PackageNotFoundError:
    __version__ = "0+local"
from fleetsim.balancer import StatusBalancer
from fleetsim.config import FleetConfig
from fleetsim.exceptions import (
    CarNotFoundError,
    FleetConfigError,
    FleetError,
    PersistenceError,
    SeedSourceUnavailableError,
)
from fleetsim.generator import CarGenerator
from fleetsim.initializer import FleetInitializer
from fleetsim.models import Car, CarCreate, CarStatus, CarUpdate, StatusCount
from fleetsim.scheduler import IntervalScheduler
from fleetsim.seed import LocalSeedSource, MockApiSeedSource, SeedSource
from fleetsim.service import FleetService
from fleetsim.store import CarStore, InMemoryCarStore
from fleetsim.updater import PositionUpdater

__all__ = [
    "__version__",
    "Car",
    "CarCreate",
    "CarGenerator",
    "CarNotFoundError",
    "CarStatus",
    "CarStore",
    "CarUpdate",
    "FleetConfig",
    "FleetConfigError",
    "FleetError",
    "FleetInitializer",
    "FleetService",
    "InMemoryCarStore",
    "IntervalScheduler",
    "LocalSeedSource",
    "MockApiSeedSource",
    "PersistenceError",
    "PositionUpdater",
    "SeedSource",
    "SeedSourceUnavailableError",
    "StatusBalancer",
    "StatusCount",
]
