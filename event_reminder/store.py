# -*- coding: utf-8 -*-
"""
Event store: the in-memory collection of events with write-through persistence.

The store exclusively owns its list of events. The injected key-value store
is a durable mirror: it is read once on construction and written after every
mutation. In-memory state stays authoritative for the session even if a
write fails.
"""
from __future__ import annotations

import json
import logging
import random
import string
import typing as t
from dataclasses import replace
from datetime import datetime

from event_reminder.config import EVENTS_STORAGE_KEY
from event_reminder.dates import parse_date
from event_reminder.errors import InvalidDateError, NotFoundError, PersistenceError, ValidationError
from event_reminder.models import EventRecord, StoreChange
from event_reminder.storage import KeyValueStore
from event_reminder.validation import TITLE_MAX_LENGTH, TITLE_MIN_LENGTH, validate_event

logger = logging.getLogger(__name__)

UNTITLED_EVENT = "Untitled Event"

Subscriber = t.Callable[[StoreChange], None]

_ID_ALPHABET = string.digits + string.ascii_lowercase


class EventStore:
    """Ordered collection of events backed by a key-value store."""

    def __init__(
            self,
            kv: KeyValueStore,
            storage_key: str = EVENTS_STORAGE_KEY,
            clock: t.Optional[t.Callable[[], datetime]] = None,
            id_factory: t.Optional[t.Callable[[], str]] = None,
    ) -> None:
        """Create the store and load any persisted events.

        :param kv: Key-value store used as the durable mirror.
        :param storage_key: Key the serialized events live under.
        :param clock: Returns the current time. Defaults to ``datetime.now``.
        :param id_factory: Returns a new candidate id. Defaults to a
            timestamp plus random suffix.
        """
        self._kv = kv
        self._storage_key = storage_key
        self._clock = clock or datetime.now
        self._id_factory = id_factory or self._default_id
        self._events: list[EventRecord] = []
        self._subscribers: list[Subscriber] = []
        self.last_save_ok = True
        self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        """Read persisted events, falling back to an empty collection."""
        try:
            stored = self._kv.get(self._storage_key)
            raw_events = json.loads(stored) if stored else []
        except (PersistenceError, ValueError) as e:
            logger.error("Error loading events from storage: %s", e)
            raw_events = []

        if not isinstance(raw_events, list):
            logger.error("Stored events are not a list; starting empty")
            raw_events = []

        self._events = self._repair_all(raw_events)
        logger.debug("Loaded %d event(s) from storage", len(self._events))

    def _save(self) -> bool:
        """Mirror the current events to the key-value store."""
        payload = json.dumps([event.to_dict() for event in self._events])
        try:
            ok = bool(self._kv.set(self._storage_key, payload))
        except PersistenceError as e:
            logger.error("Error saving events to storage: %s", e)
            ok = False
        if not ok:
            logger.error("Events could not be persisted; keeping in-memory state")
        self.last_save_ok = ok
        return ok

    def _repair_all(
            self,
            raw_events: list[t.Any],
            taken_ids: t.Optional[set[str]] = None,
    ) -> list[EventRecord]:
        """Repair loaded records, dropping unusable ones and duplicate ids."""
        repaired: list[EventRecord] = []
        seen_ids: set[str] = set(taken_ids or ())
        # generated ids must not collide with an id carried later in the payload
        reserved_ids = seen_ids | {
            str(raw["id"]) for raw in raw_events if isinstance(raw, dict) and raw.get("id")
        }
        for raw in raw_events:
            record = self._repair(raw, reserved_ids)
            if record is None:
                continue
            if record.id in seen_ids:
                logger.warning("Dropping duplicate event id %s", record.id)
                continue
            seen_ids.add(record.id)
            reserved_ids.add(record.id)
            repaired.append(record)
        return repaired

    def _repair(self, raw: t.Any, taken_ids: set[str]) -> t.Optional[EventRecord]:
        """Fill in missing optional fields of one loaded record."""
        if not isinstance(raw, dict):
            logger.warning("Dropping malformed event entry: %r", raw)
            return None
        try:
            event_date = parse_date(raw.get("date")).isoformat()
        except InvalidDateError:
            logger.warning("Dropping event with invalid date: %r", raw.get("date"))
            return None

        event_id = raw.get("id")
        title = raw.get("title")
        description = raw.get("description")
        created_at = raw.get("createdAt")

        return EventRecord(
            id=str(event_id) if event_id else self._new_id(taken_ids),
            title=self._repair_title(title),
            date=event_date,
            description=description.strip() if isinstance(description, str) else "",
            created_at=created_at if isinstance(created_at, str) and created_at else self._now_iso(),
        )

    @staticmethod
    def _repair_title(title: t.Any) -> str:
        """Trim a loaded title and bring it within the accepted length."""
        if not isinstance(title, str):
            return UNTITLED_EVENT
        title = title.strip()[:TITLE_MAX_LENGTH].rstrip()
        if len(title) < TITLE_MIN_LENGTH:
            return UNTITLED_EVENT
        return title

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _default_id(self) -> str:
        suffix = "".join(random.choices(_ID_ALPHABET, k=9))
        return f"event_{int(self._clock().timestamp() * 1000)}_{suffix}"

    def _new_id(self, taken_ids: t.Optional[set[str]] = None) -> str:
        taken = taken_ids if taken_ids is not None else {event.id for event in self._events}
        event_id = self._id_factory()
        while event_id in taken:
            event_id = self._id_factory()
        return event_id

    def _now_iso(self) -> str:
        return self._clock().isoformat()

    def _index_of(self, event_id: str) -> int:
        for index, event in enumerate(self._events):
            if event.id == event_id:
                return index
        return -1

    def _notify(self, change: StoreChange) -> None:
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception("Store subscriber failed on %s change", change.kind)

    @staticmethod
    def _validated(title: t.Optional[str], date: t.Any) -> tuple[str, str]:
        result = validate_event(title, date)
        if not result.is_valid:
            raise ValidationError(result.errors)
        return title.strip(), parse_date(date).isoformat()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> t.Callable[[], None]:
        """Register a change callback. Returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def add(self, title: str, date: t.Any, description: t.Optional[str] = "") -> EventRecord:
        """Add a new event.

        :param title: Event title, 3 to 100 characters after trimming.
        :param date: Event date (``YYYY-MM-DD`` or a date object).
        :param description: Optional free text.
        :return: The stored EventRecord.
        :raises ValidationError: If the title or date is invalid.
        """
        clean_title, clean_date = self._validated(title, date)
        event = EventRecord(
            id=self._new_id(),
            title=clean_title,
            date=clean_date,
            description=(description or "").strip(),
            created_at=self._now_iso(),
        )
        self._events.append(event)
        self._save()
        logger.info("Added event %s (%s)", event.id, event.date)
        self._notify(StoreChange(kind="added", record=event))
        return event

    def update(
            self,
            event_id: str,
            title: str,
            date: t.Any,
            description: t.Optional[str] = "",
    ) -> EventRecord:
        """Replace the title, date and description of an existing event.

        :raises NotFoundError: If no event has this id.
        :raises ValidationError: If the title or date is invalid.
        """
        index = self._index_of(event_id)
        if index == -1:
            raise NotFoundError(event_id)

        clean_title, clean_date = self._validated(title, date)
        event = replace(
            self._events[index],
            title=clean_title,
            date=clean_date,
            description=(description or "").strip(),
        )
        self._events[index] = event
        self._save()
        logger.info("Updated event %s", event.id)
        self._notify(StoreChange(kind="updated", record=event))
        return event

    def delete(self, event_id: str) -> bool:
        """Remove an event. Returns False if it was not there."""
        index = self._index_of(event_id)
        if index == -1:
            return False

        event = self._events.pop(index)
        self._save()
        logger.info("Deleted event %s", event_id)
        self._notify(StoreChange(kind="deleted", record=event))
        return True

    def get_by_id(self, event_id: str) -> t.Optional[EventRecord]:
        """Return the event with this id, or None."""
        index = self._index_of(event_id)
        return self._events[index] if index != -1 else None

    def list_sorted(self) -> list[EventRecord]:
        """All events by ascending date; events on the same date keep insertion order."""
        return sorted(self._events, key=lambda event: event.date)

    def count(self) -> int:
        """Total number of events."""
        return len(self._events)

    def clear(self) -> None:
        """Remove every event."""
        self._events = []
        self._save()
        self._notify(StoreChange(kind="cleared"))

    def export_json(self) -> str:
        """Serialize every event in the persisted format, in insertion order."""
        return json.dumps([event.to_dict() for event in self._events], indent=2)

    def import_json(self, text: str, replace_existing: bool = True) -> int:
        """Load events from exported JSON.

        Imported records go through the same repair pass as persisted ones.

        :param text: JSON array of event objects.
        :param replace_existing: Replace the collection, or append events
            whose ids are not already present.
        :return: Number of events imported.
        :raises ValidationError: If the text is not a JSON array.
        """
        try:
            raw_events = json.loads(text)
        except ValueError as e:
            raise ValidationError({"data": f"Import data is not valid JSON: {e}"}) from e
        if not isinstance(raw_events, list):
            raise ValidationError({"data": "Import data must be a JSON array of events"})

        if replace_existing:
            imported = self._repair_all(raw_events)
            self._events = imported
        else:
            existing_ids = {event.id for event in self._events}
            imported = self._repair_all(raw_events, existing_ids)
            self._events.extend(imported)

        self._save()
        logger.info("Imported %d event(s)", len(imported))
        self._notify(StoreChange(kind="imported"))
        return len(imported)
