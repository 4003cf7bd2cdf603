"""Repository protocol definitions (interfaces)."""

from sharevalue.repositories.protocols.key_value_store import KeyValueStore

__all__ = [
    "KeyValueStore",
]
