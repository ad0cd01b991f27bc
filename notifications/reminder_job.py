"""Glue between the event store, the reminder policy and the email dispatcher."""
from __future__ import annotations

import asyncio
import logging
import typing as t

from event_reminder.models import StoreChange
from event_reminder.reminders import NotificationPolicy
from event_reminder.store import EventStore
from notifications.email_service import DispatchResult, EmailDispatcher

logger = logging.getLogger(__name__)


async def send_due_reminders(
        store: EventStore,
        policy: NotificationPolicy,
        dispatcher: EmailDispatcher,
) -> list[DispatchResult]:
    """Send a reminder for every due event, one at a time.

    Only successful sends are recorded, so a failed event is picked up again
    the next time this runs. Nothing is retried within a run.
    """
    results = []
    for event in policy.due_events(store.list_sorted()):
        result = await dispatcher.send(event)
        if result.ok:
            policy.mark_sent(event)
        results.append(result)
    return results


def notify_on_change(
        store: EventStore,
        policy: NotificationPolicy,
        dispatcher: EmailDispatcher,
) -> t.Callable[[], None]:
    """Dispatch a reminder in the background when an added or updated event is due.

    The store mutation has already completed when the callback runs, so a
    failed dispatch cannot affect it.

    :return: Function that detaches the listener.
    """
    def on_change(change: StoreChange) -> None:
        if change.kind not in ("added", "updated") or change.record is None:
            return
        event = change.record
        if not policy.is_due(event):
            return
        try:
            task = dispatcher.dispatch(event)
        except RuntimeError:
            logger.warning("No running event loop; reminder for %s not sent", event.id)
            return

        def record_sent(done: asyncio.Task) -> None:
            if done.cancelled():
                return
            if done.exception() is not None:
                logger.error("Reminder for %s crashed: %s", event.id, done.exception())
                return
            if done.result().ok:
                policy.mark_sent(event)

        task.add_done_callback(record_sent)

    return store.subscribe(on_change)
