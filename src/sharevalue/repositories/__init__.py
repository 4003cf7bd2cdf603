"""Repository layer - data access abstractions and implementations."""

from sharevalue.repositories.protocols import KeyValueStore

__all__ = [
    "KeyValueStore",
]
