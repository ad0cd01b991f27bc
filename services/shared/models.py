"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the dataclass models used by the
event reminder core, ensuring consistent JSON serialization across services.
"""
from __future__ import annotations

import typing as t
from dataclasses import asdict

from pydantic import BaseModel, ConfigDict, Field

from event_reminder.models import EventRecord, EventView


EventStatusName = t.Literal["today", "past", "upcoming", "future"]


class Event(BaseModel):
    """Represents a stored event as it appears on the wire."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    date: str                                            # "YYYY-MM-DD"
    description: str = ""
    created_at: str = Field(default="", alias="createdAt")  # ISO timestamp

    @classmethod
    def from_record(cls, record: EventRecord) -> "Event":
        return cls(**asdict(record))


class Countdown(BaseModel):
    """Time remaining until an event."""
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    is_past: bool = False


class EventViewModel(BaseModel):
    """Derived display data for one event."""
    event: Event
    status: EventStatusName
    status_label: str
    date_long: str
    date_relative: str
    countdown: t.Optional[Countdown] = None
    countdown_text: str = ""

    @classmethod
    def from_view(cls, view: EventView) -> "EventViewModel":
        return cls(
            event=Event.from_record(view.event),
            status=view.status.value,
            status_label=view.status_label,
            date_long=view.date_long,
            date_relative=view.date_relative,
            countdown=Countdown(**asdict(view.countdown)) if view.countdown else None,
            countdown_text=view.countdown_text,
        )


# Request/Response Models for API endpoints
class EventRequest(BaseModel):
    """Request model for creating or updating an event."""
    title: str
    date: str
    description: str = ""


class DeleteEventResponse(BaseModel):
    """Response model for event deletion."""
    deleted: bool


class ImportEventsRequest(BaseModel):
    """Request model for importing previously exported events."""
    events: list[dict[str, t.Any]]
    replace: bool = True


class ImportEventsResponse(BaseModel):
    """Response model for an import."""
    imported: int
    total: int


class ShowEventsResponse(BaseModel):
    """Response model for formatted events display."""
    formatted_events: str
