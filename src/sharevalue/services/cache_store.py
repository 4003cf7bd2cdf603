"""
Persistent cache store: JSON records over a raw key-value store.

A storage failure never fails the caller. Reads fall back to the supplied
default and writes report False; both log the underlying exception.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sharevalue.core.timezone import parse_datetime_utc
from sharevalue.domain.models import DataKind, TimePoint, TimeSeries
from sharevalue.repositories.protocols import KeyValueStore

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class CacheKeys:
    """Namespaced keys for every persisted record."""

    namespace: str = "share-value"

    def value_key(self, kind: DataKind) -> str:
        return f"{self.namespace}-{kind.value.replace('_', '-')}"

    def updated_key(self, kind: DataKind) -> str:
        return f"{self.namespace}-last-{kind.value.replace('_', '-')}-update"

    def revalidated_key(self, kind: DataKind) -> str:
        """When a historical series was last fetched over its full range."""
        return f"{self.namespace}-last-{kind.value.replace('_', '-')}-revalidation"

    @property
    def shares(self) -> str:
        return f"{self.namespace}-shares"

    @property
    def scenarios(self) -> str:
        return f"{self.namespace}-what-if-scenarios"


class CacheStore:
    """Fault-containing JSON cache over a KeyValueStore."""

    def __init__(self, store: KeyValueStore, keys: Optional[CacheKeys] = None):
        self._store = store
        self._keys = keys or CacheKeys()

    @property
    def keys(self) -> CacheKeys:
        return self._keys

    # Raw access

    def get(self, key: str) -> Optional[str]:
        """Return the raw stored string, or None if absent or unreadable."""
        try:
            return self._store.get(key)
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None

    def set(self, key: str, value: str) -> bool:
        """Store a raw string. Returns False (and logs) on failure."""
        try:
            self._store.set(key, value)
            return True
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)
            return False

    def remove(self, key: str) -> bool:
        try:
            self._store.delete(key)
            return True
        except Exception:
            logger.warning("Cache delete failed for %s", key, exc_info=True)
            return False

    # JSON access

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed cache record %s", key)
            return default

    def set_json(self, key: str, value: Any) -> bool:
        try:
            encoded = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError):
            logger.warning("Cache record %s is not JSON serializable", key, exc_info=True)
            return False
        return self.set(key, encoded)

    # Typed helpers

    def get_float(self, key: str) -> Optional[float]:
        value = self.get_json(key, _MISSING)
        if value is _MISSING:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning("Cache record %s is not a number", key)
            return None
        return float(value)

    def get_int(self, key: str) -> Optional[int]:
        value = self.get_json(key, _MISSING)
        if value is _MISSING:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            logger.warning("Cache record %s is not an integer", key)
            return None
        return value

    def get_timestamp(self, key: str) -> Optional[datetime]:
        value = self.get_json(key)
        if not isinstance(value, str):
            return None
        try:
            return parse_datetime_utc(value)
        except (ValueError, OverflowError):
            logger.warning("Cache record %s is not a timestamp", key)
            return None

    def set_timestamp(self, key: str, value: datetime) -> bool:
        return self.set_json(key, value.isoformat())

    def get_series(self, key: str) -> Optional[TimeSeries]:
        """Cached series with unusable points skipped; None if nothing is cached."""
        raw_points = self.get_json(key, _MISSING)
        if raw_points is _MISSING:
            return None
        if not isinstance(raw_points, list):
            logger.warning("Cache record %s is not a series", key)
            return None
        points = [TimePoint.from_dict(item) for item in raw_points]
        return sorted((p for p in points if p is not None), key=lambda p: p.timestamp)

    def set_series(self, key: str, series: TimeSeries) -> bool:
        return self.set_json(key, [point.to_dict() for point in series])
