"""Person/relationship storage backends."""
from .base import RelationshipQuery, RelationshipStore
from .memory import InMemoryStore
from .sqlite import SQLiteStore

__all__ = [
    "InMemoryStore",
    "RelationshipQuery",
    "RelationshipStore",
    "SQLiteStore",
]
