"""Seed sources: where the fleet is mirrored besides the local store."""

from fleetsim.seed.base import SeedSource
from fleetsim.seed.local import LocalSeedSource
from fleetsim.seed.remote import MockApiSeedSource

__all__ = ["LocalSeedSource", "MockApiSeedSource", "SeedSource"]
