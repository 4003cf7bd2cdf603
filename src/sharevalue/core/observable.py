"""
Last-known-value cells with subscriber notification.

An Observable always holds a value. Subscribers are called synchronously on
every publish, in subscription order, on the thread that publishes (the event
loop thread in this application).
"""

import logging
from typing import Any, Callable, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class Observable(Generic[T]):
    """Owned state cell that notifies its subscribers when a value is published."""

    def __init__(self, initial: T, name: str = "observable"):
        self._value = initial
        self._name = name
        self._subscribers: list[Callable[[T], None]] = []
        self._upstream: list[Unsubscribe] = []

    @property
    def value(self) -> T:
        return self._value

    @property
    def name(self) -> str:
        return self._name

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[T], None], emit_current: bool = True) -> Unsubscribe:
        """
        Register a callback.

        With emit_current the callback receives the current value immediately.
        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        if emit_current:
            self._notify_one(callback, self._value)
        return _unsubscribe

    def publish(self, value: T) -> None:
        """Store value and notify every subscriber, even if the value is unchanged."""
        self._value = value
        for callback in self._subscribers[:]:
            self._notify_one(callback, value)

    def attach_upstream(self, unsubscribe: Unsubscribe) -> None:
        """Remember a subscription this cell holds on another cell, released by dispose()."""
        self._upstream.append(unsubscribe)

    def dispose(self) -> None:
        """Drop upstream subscriptions and all subscribers."""
        for unsubscribe in self._upstream:
            unsubscribe()
        self._upstream.clear()
        self._subscribers.clear()

    def _notify_one(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Subscriber of %s failed", self._name)


def combine_latest(
    sources: Sequence[Observable[Any]],
    compute: Callable[..., T],
    name: str = "combined",
) -> Observable[T]:
    """
    Derive a cell from the latest values of several cells.

    compute receives the current value of each source, in order, and is re-run
    whenever any source publishes. Call dispose() on the result to detach it.
    """
    derived: Observable[T] = Observable(compute(*(s.value for s in sources)), name=name)

    def _recompute(_value: Any) -> None:
        derived.publish(compute(*(s.value for s in sources)))

    for source in sources:
        derived.attach_upstream(source.subscribe(_recompute, emit_current=False))
    return derived

