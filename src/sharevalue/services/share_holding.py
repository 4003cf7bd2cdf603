"""The user's share count."""

import logging

from sharevalue.core.exceptions import ValidationError
from sharevalue.core.observable import Observable
from sharevalue.services.cache_store import CacheStore

logger = logging.getLogger(__name__)


class ShareHolding:
    """Owns the number of shares held. Changes are persisted immediately."""

    def __init__(self, cache: CacheStore):
        self._cache = cache
        self._key = cache.keys.shares
        cached = cache.get_int(self._key)
        if cached is None or cached < 0:
            cached = 0
        self._shares: Observable[int] = Observable(cached, name="shares")

    @property
    def shares(self) -> int:
        return self._shares.value

    @property
    def stream(self) -> Observable[int]:
        return self._shares

    def set_shares(self, shares: int) -> int:
        """
        Set the share count.

        Raises:
            ValidationError: if shares is not a non-negative integer
        """
        if isinstance(shares, bool) or not isinstance(shares, int):
            raise ValidationError(f"Share count must be an integer, got {shares!r}")
        if shares < 0:
            raise ValidationError(f"Share count cannot be negative: {shares}")

        self._cache.set_json(self._key, shares)
        self._shares.publish(shares)
        logger.info("Share count set to %d", shares)
        return shares

    def clear(self) -> None:
        """Forget the stored share count."""
        self._cache.remove(self._key)
        self._shares.publish(0)
