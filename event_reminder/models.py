"""
Data models for the event reminder core.

This module contains the dataclasses used to represent stored events, their
derived display data, and store change notifications.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import typing as t


class EventStatus(str, Enum):
    """Temporal status of an event relative to a reference date."""
    TODAY = "today"
    PAST = "past"
    UPCOMING = "upcoming"
    FUTURE = "future"


@dataclass
class EventRecord:
    """Represents a stored event with title, date, and description."""
    id: str
    title: str
    date: str  # "YYYY-MM-DD"
    description: str = ""
    created_at: str = ""  # ISO timestamp

    def to_dict(self) -> dict[str, str]:
        """Serialize to the persisted JSON shape."""
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "description": self.description,
            "createdAt": self.created_at,
        }


@dataclass
class Countdown:
    """Time remaining until an event, split into whole units."""
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    is_past: bool = False


@dataclass
class EventView:
    """Derived display data for one event at one moment."""
    event: EventRecord
    status: EventStatus
    status_label: str
    date_long: str
    date_relative: str
    countdown: t.Optional[Countdown] = None
    countdown_text: str = ""


@dataclass
class ValidationResult:
    """Outcome of validating event input."""
    is_valid: bool
    errors: dict[str, str] = field(default_factory=dict)


ChangeKind = t.Literal["added", "updated", "deleted", "cleared", "imported"]


@dataclass
class StoreChange:
    """Notification sent to store subscribers after a mutation."""
    kind: ChangeKind
    record: t.Optional[EventRecord] = None
