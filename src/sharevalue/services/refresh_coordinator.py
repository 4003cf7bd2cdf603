"""
Refresh trigger coordinator.

Turns three kinds of events into refresh requests on the synchronization units:

- periodic ticks (one cadence for live/intraday units, one for historical),
- a "resumed" signal derived from visibility and focus changes,
- online/offline transitions.

While offline nothing is requested. Going back online forces one refresh of
every unit. Other triggers go through each unit's staleness gate, so bursts
of events collapse into at most one remote call per staleness window.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Iterable

from sharevalue.core.observable import Observable
from sharevalue.services.sync_unit import SyncUnit

logger = logging.getLogger(__name__)

# Timer jitter tolerated when a tick lands on the staleness threshold
TICK_SLACK = timedelta(seconds=1)


class RefreshCoordinator:
    """Owns the refresh timers and the resume/online signals for one engine session."""

    def __init__(
        self,
        live_units: Iterable[SyncUnit],
        historical_units: Iterable[SyncUnit],
        live_interval_seconds: float = 5 * 60,
        historical_interval_seconds: float = 24 * 60 * 60,
        online: bool = True,
    ):
        self._live_units = list(live_units)
        self._historical_units = list(historical_units)
        self._live_interval = live_interval_seconds
        self._historical_interval = historical_interval_seconds
        self._is_online: Observable[bool] = Observable(online, name="is_online")
        # the app starts visible and focused
        self._resumed_signal = True
        self._tasks: list[asyncio.Task] = []

    @property
    def is_online(self) -> Observable[bool]:
        return self._is_online

    @property
    def units(self) -> list[SyncUnit]:
        return self._live_units + self._historical_units

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    # Lifecycle

    def start(self) -> list[asyncio.Task]:
        """Request the initial refresh of every unit and start the periodic ticks."""
        if self.running:
            return []
        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(
                self._tick_loop(self._live_units, self._live_interval), name="tick-live"
            ),
            loop.create_task(
                self._tick_loop(self._historical_units, self._historical_interval),
                name="tick-historical",
            ),
        ]
        return self.trigger(self.units)

    async def stop(self) -> None:
        """Cancel the periodic ticks. In-flight fetches are left to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _tick_loop(self, units: list[SyncUnit], interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.trigger(units, slack=TICK_SLACK)

    # Triggers

    def trigger(
        self,
        units: Iterable[SyncUnit],
        force: bool = False,
        slack: timedelta = timedelta(0),
    ) -> list[asyncio.Task]:
        """Ask each unit to refresh; does nothing while offline."""
        if not self._is_online.value:
            logger.debug("Offline; refresh suppressed")
            return []
        tasks = []
        for unit in units:
            task = unit.request_refresh(force=force, slack=slack)
            if task is not None:
                tasks.append(task)
        return tasks

    def tick_live(self) -> list[asyncio.Task]:
        return self.trigger(self._live_units, slack=TICK_SLACK)

    def tick_historical(self) -> list[asyncio.Task]:
        return self.trigger(self._historical_units, slack=TICK_SLACK)

    def force_refresh_all(self) -> list[asyncio.Task]:
        return self.trigger(self.units, force=True)

    # Signals

    def notify_visibility(self, visible: bool) -> list[asyncio.Task]:
        return self._on_resume_signal(visible)

    def notify_focus(self, focused: bool) -> list[asyncio.Task]:
        return self._on_resume_signal(focused)

    def _on_resume_signal(self, value: bool) -> list[asyncio.Task]:
        # visibility and focus feed one stream; only a change to True resumes
        if value == self._resumed_signal:
            return []
        self._resumed_signal = value
        if not value:
            return []
        logger.debug("App resumed; refreshing stale data")
        return self.trigger(self.units)

    def set_online(self, online: bool) -> list[asyncio.Task]:
        was_online = self._is_online.value
        if online == was_online:
            return []
        self._is_online.publish(online)
        if not online:
            logger.info("Went offline; refreshes suspended")
            return []
        logger.info("Back online; refreshing everything")
        return self.force_refresh_all()
