"""
Reminder bookkeeping: which events are due for a notification today.

An event is due when it falls within ``lead_days`` of today (today itself
included) and no reminder has been sent for it yet today. Sent reminders are
recorded as ``<event id>:<YYYY-MM-DD>`` entries in the key-value store, so
each event is reminded at most once per day.
"""
from __future__ import annotations

import json
import logging
import typing as t
from datetime import datetime

from event_reminder.config import REMINDER_LEAD_DAYS, SENT_STORAGE_KEY
from event_reminder.dates import days_until
from event_reminder.errors import PersistenceError
from event_reminder.models import EventRecord
from event_reminder.storage import KeyValueStore

logger = logging.getLogger(__name__)


def sent_key(event_id: str, day: str) -> str:
    return f"{event_id}:{day}"


class NotificationPolicy:
    """Decides which events need a reminder and remembers the ones sent."""

    def __init__(
            self,
            kv: KeyValueStore,
            clock: t.Optional[t.Callable[[], datetime]] = None,
            lead_days: int = REMINDER_LEAD_DAYS,
            storage_key: str = SENT_STORAGE_KEY,
    ) -> None:
        self._kv = kv
        self._clock = clock or datetime.now
        self.lead_days = lead_days
        self._storage_key = storage_key
        self._sent = self._load()

    def _load(self) -> set[str]:
        try:
            stored = self._kv.get(self._storage_key)
            entries = json.loads(stored) if stored else []
        except (PersistenceError, ValueError) as e:
            logger.error("Error loading sent reminders: %s", e)
            return set()
        if not isinstance(entries, list):
            return set()
        return {entry for entry in entries if isinstance(entry, str)}

    def _today(self) -> str:
        return self._clock().date().isoformat()

    def was_sent(self, event: EventRecord) -> bool:
        return sent_key(event.id, self._today()) in self._sent

    def is_due(self, event: EventRecord) -> bool:
        diff = days_until(event.date, self._today())
        return 0 <= diff <= self.lead_days and not self.was_sent(event)

    def due_events(self, events: t.Iterable[EventRecord]) -> list[EventRecord]:
        """Events that should be reminded about now."""
        return [event for event in events if self.is_due(event)]

    def mark_sent(self, event: EventRecord) -> bool:
        """Record today's reminder for this event.

        Entries from earlier days are dropped since they can no longer match.

        :return: Whether the bookkeeping was persisted.
        """
        today = self._today()
        self._sent = {entry for entry in self._sent if entry.endswith(f":{today}")}
        self._sent.add(sent_key(event.id, today))
        ok = self._kv.set(self._storage_key, json.dumps(sorted(self._sent)))
        if not ok:
            logger.error("Could not persist reminder bookkeeping for %s", event.id)
        return ok
