"""
View synchronization: keeps derived display data in step with the store and the clock.

The synchronizer recomputes every event's status and countdown immediately
after a store mutation and on a fixed cadence while the view is visible. It
also watches for the calendar day rolling over, since today/past/upcoming
boundaries are date-relative and would otherwise go stale between mutations.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import typing as t
from datetime import datetime

from event_reminder.config import COUNTDOWN_INTERVAL_SECONDS, UPCOMING_WINDOW_DAYS
from event_reminder.countdown import format_countdown, get_countdown
from event_reminder.dates import format_date_long, format_date_relative, get_event_status, status_label
from event_reminder.models import EventStatus, EventView, StoreChange
from event_reminder.store import EventStore

logger = logging.getLogger(__name__)

RefreshCallback = t.Callable[[list[EventView]], None]


class RecurringTask:
    """Runs a callback every ``interval`` seconds on the running event loop.

    The task is a resource: ``stop`` cancels it and ``aclose`` waits for the
    cancellation to finish. Both are safe to call when not running.
    """

    def __init__(self, callback: t.Callable[[], t.Any], interval: float) -> None:
        self.callback = callback
        self.interval = interval
        self._task: t.Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def aclose(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.callback()
            except Exception:
                logger.exception("Recurring task callback failed")


class ViewSynchronizer:
    """Recomputes classifier and countdown output for every stored event."""

    def __init__(
            self,
            store: EventStore,
            on_refresh: t.Optional[RefreshCallback] = None,
            clock: t.Optional[t.Callable[[], datetime]] = None,
            interval: float = COUNTDOWN_INTERVAL_SECONDS,
            upcoming_days: int = UPCOMING_WINDOW_DAYS,
    ) -> None:
        self.store = store
        self.on_refresh = on_refresh
        self.upcoming_days = upcoming_days
        self.views: list[EventView] = []
        self.last_observed_date: t.Optional[str] = None
        self._clock = clock or datetime.now
        self._timer = RecurringTask(self.tick, interval)
        self._unsubscribe = store.subscribe(self._on_store_change)

    @property
    def running(self) -> bool:
        return self._timer.running

    def compute(self) -> list[EventView]:
        """Derive display data for every event, in ``list_sorted`` order.

        Past events carry no countdown.
        """
        now = self._clock()
        today = now.date()
        views = []
        for event in self.store.list_sorted():
            status = get_event_status(event.date, today, self.upcoming_days)
            countdown = None
            countdown_text = ""
            if status is not EventStatus.PAST:
                countdown = get_countdown(event.date, now)
                countdown_text = format_countdown(countdown)
            views.append(EventView(
                event=event,
                status=status,
                status_label=status_label(status),
                date_long=format_date_long(event.date),
                date_relative=format_date_relative(event.date, today),
                countdown=countdown,
                countdown_text=countdown_text,
            ))
        return views

    def refresh(self) -> list[EventView]:
        """Recompute and push the result to the refresh callback."""
        self.views = self.compute()
        if self.on_refresh is not None:
            self.on_refresh(self.views)
        return self.views

    def check_day_change(self) -> bool:
        """Record the current date; True if it differs from the last one observed."""
        current = self._clock().date().isoformat()
        changed = self.last_observed_date is not None and self.last_observed_date != current
        self.last_observed_date = current
        return changed

    def tick(self) -> bool:
        """One timer step: detect a day rollover, then recompute everything.

        :return: True if the calendar day changed since the previous tick.
        """
        rolled_over = self.check_day_change()
        if rolled_over:
            logger.info("Day changed to %s; reclassifying events", self.last_observed_date)
        self.refresh()
        return rolled_over

    def _on_store_change(self, change: StoreChange) -> None:
        logger.debug("Store %s; refreshing views", change.kind)
        self.refresh()

    def start(self) -> None:
        """Recompute once now, then keep recomputing every interval."""
        self.tick()
        self._timer.start()

    def stop(self) -> None:
        """Cancel the recurring recomputation."""
        self._timer.stop()

    def set_visible(self, visible: bool) -> None:
        """Pause while hidden; resume with an immediate recompute when shown."""
        if visible:
            self.start()
        else:
            self.stop()

    async def aclose(self) -> None:
        """Stop the timer and detach from the store."""
        await self._timer.aclose()
        self._unsubscribe()

    async def __aenter__(self) -> "ViewSynchronizer":
        self.start()
        return self

    async def __aexit__(self, *exc_info: t.Any) -> None:
        await self.aclose()
