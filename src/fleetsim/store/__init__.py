"""Car store layer.

The store is the single owner of car records and of id assignment.
Everything else reads and writes cars through the :class:`CarStore`
protocol.
"""

from fleetsim.store.base import CarStore
from fleetsim.store.memory import InMemoryCarStore

__all__ = ["CarStore", "InMemoryCarStore"]
