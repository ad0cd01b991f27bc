"""
Error taxonomy for the event reminder core.

All of these are recoverable at the call site. None of them should end a
session.
"""
from __future__ import annotations

import typing as t


class EventReminderError(Exception):
    """Base class for every error raised by the event reminder core."""


class ValidationError(EventReminderError):
    """User-correctable input problem, scoped to one or more fields.

    ``errors`` maps a field name (``"title"``, ``"date"``) to a message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        detail = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Invalid event: {detail}")


class NotFoundError(EventReminderError):
    """An operation referenced an event id that is not in the store."""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Event '{event_id}' not found")


class InvalidDateError(EventReminderError, ValueError):
    """A date could not be parsed for classification or formatting."""

    def __init__(self, value: t.Any) -> None:
        self.value = value
        super().__init__(f"Invalid date: {value!r}")


class PersistenceError(EventReminderError):
    """The key-value store failed a read or a write."""


class TemplateError(EventReminderError):
    """A message template is missing or needs a field that was not given."""
