"""Key-value store protocol for persisted cache records."""

from typing import Protocol, Optional


class KeyValueStore(Protocol):
    """
    Synchronous string-keyed store.

    Implementations may raise on any call (quota, I/O, serialization);
    callers are expected to guard every access.
    """

    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None when the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite the value for key."""
        ...

    def delete(self, key: str) -> None:
        """Remove key if present."""
        ...
