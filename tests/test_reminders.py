"""Tests for reminder bookkeeping."""
import json

from event_reminder.reminders import NotificationPolicy
from event_reminder.storage import MemoryKeyValueStore
from event_reminder.store import EventStore

from conftest import FixedClock

SENT_KEY = "eventReminder_sent"


def test_due_events_fall_within_lead_window(store: EventStore, kv: MemoryKeyValueStore, clock: FixedClock) -> None:
    """Today and tomorrow are due with a one day lead; past and later events are not."""
    store.add("Yesterday", "2026-01-09")
    today = store.add("Today", "2026-01-10")
    tomorrow = store.add("Tomorrow", "2026-01-11")
    store.add("Day after", "2026-01-12")

    policy = NotificationPolicy(kv, clock=clock, lead_days=1)
    assert policy.due_events(store.list_sorted()) == [today, tomorrow]


def test_reminder_sent_once_per_day(store: EventStore, kv: MemoryKeyValueStore, clock: FixedClock) -> None:
    """A sent reminder is not due again the same day, but is the next day."""
    event = store.add("Tomorrow", "2026-01-11")
    policy = NotificationPolicy(kv, clock=clock)

    assert policy.is_due(event)
    assert policy.mark_sent(event) is True
    assert policy.was_sent(event)
    assert not policy.is_due(event)
    assert json.loads(kv.data[SENT_KEY]) == [f"{event.id}:2026-01-10"]

    reloaded = NotificationPolicy(kv, clock=clock)
    assert not reloaded.is_due(event)

    clock.advance(days=1)
    assert reloaded.is_due(event)


def test_old_bookkeeping_is_pruned(store: EventStore, kv: MemoryKeyValueStore, clock: FixedClock) -> None:
    first = store.add("First", "2026-01-11")
    second = store.add("Second", "2026-01-12")
    policy = NotificationPolicy(kv, clock=clock, lead_days=3)
    policy.mark_sent(first)

    clock.advance(days=1)
    policy.mark_sent(second)
    assert json.loads(kv.data[SENT_KEY]) == [f"{second.id}:2026-01-11"]


def test_corrupt_bookkeeping_is_ignored(store: EventStore, clock: FixedClock) -> None:
    event = store.add("Today", "2026-01-10")
    policy = NotificationPolicy(MemoryKeyValueStore({SENT_KEY: "{oops"}), clock=clock)
    assert policy.is_due(event)
