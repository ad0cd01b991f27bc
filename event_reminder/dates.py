"""
Temporal classification and date formatting.

Pure functions that map a calendar date to a status (today, past, upcoming,
future) and to human readable text, given a reference date. Comparison is
always date-only: two moments on the same calendar day compare equal.
"""
from __future__ import annotations

import re
import typing as t
from datetime import date, datetime

from event_reminder.config import UPCOMING_WINDOW_DAYS
from event_reminder.errors import InvalidDateError
from event_reminder.models import EventStatus

DateLike = t.Union[str, date, datetime]

# strptime alone would also accept unpadded forms such as 2026-1-5
_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

# en-US month names; deliberately not taken from the process locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def parse_date(value: DateLike) -> date:
    """Parse a calendar date.

    Accepts ``YYYY-MM-DD`` strings, ``date`` objects and ``datetime`` objects
    (the time of day is dropped).

    :param value: The value to parse.
    :return: The calendar date.
    :raises InvalidDateError: If the value is not a valid calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value.strip()):
        raise InvalidDateError(value)
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDateError(value) from None


def get_today(now: t.Optional[datetime] = None) -> date:
    """Return the reference date: ``now`` (default: current moment) at midnight."""
    return (now or datetime.now()).date()


def days_until(value: DateLike, today: t.Optional[DateLike] = None) -> int:
    """Whole calendar days from the reference date to ``value`` (negative if before)."""
    reference = parse_date(today) if today is not None else get_today()
    return (parse_date(value) - reference).days


def get_event_status(
        value: DateLike,
        today: t.Optional[DateLike] = None,
        upcoming_days: int = UPCOMING_WINDOW_DAYS,
) -> EventStatus:
    """Classify a date relative to the reference date.

    The upcoming window excludes the reference date itself and includes its
    far end: with a 7 day window, exactly 7 days out is still upcoming.

    :param value: The event date.
    :param today: Reference date. Defaults to the current date.
    :param upcoming_days: Size of the upcoming window in calendar days.
    :return: The event's temporal status.
    """
    diff = days_until(value, today)
    if diff == 0:
        return EventStatus.TODAY
    if diff < 0:
        return EventStatus.PAST
    if diff <= upcoming_days:
        return EventStatus.UPCOMING
    return EventStatus.FUTURE


def status_label(status: EventStatus) -> str:
    """Capitalized status label, e.g. ``"Upcoming"``."""
    return status.value.capitalize()


def format_date_long(value: DateLike) -> str:
    """Format a date as e.g. ``"January 8, 2026"``."""
    parsed = parse_date(value)
    return f"{MONTH_NAMES[parsed.month - 1]} {parsed.day}, {parsed.year}"


def format_date_relative(value: DateLike, today: t.Optional[DateLike] = None) -> str:
    """Format a date relative to the reference date.

    Returns ``"Today"``, ``"Tomorrow"``, ``"Yesterday"``, ``"N days ago"`` or
    ``"In N days"``, falling back to the long format.
    """
    diff = days_until(value, today)

    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if diff < -1:
        return f"{abs(diff)} days ago"
    if diff > 1:
        return f"In {diff} days"

    return format_date_long(value)


def date_to_midnight(value: DateLike) -> datetime:
    """The naive local midnight that starts the given calendar day."""
    parsed = parse_date(value)
    return datetime(parsed.year, parsed.month, parsed.day)
