"""Validation of user-supplied event fields."""
from __future__ import annotations

import typing as t

from event_reminder.dates import parse_date
from event_reminder.errors import InvalidDateError
from event_reminder.models import ValidationResult

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100


def validate_title(title: t.Optional[str]) -> t.Optional[str]:
    """Return an error message for an invalid title, or None if it is valid."""
    trimmed = (title or "").strip()
    if not trimmed:
        return "Event title is required"
    if len(trimmed) < TITLE_MIN_LENGTH:
        return f"Event title must be at least {TITLE_MIN_LENGTH} characters"
    if len(trimmed) > TITLE_MAX_LENGTH:
        return f"Event title must not exceed {TITLE_MAX_LENGTH} characters"
    return None


def validate_date(value: t.Any) -> t.Optional[str]:
    """Return an error message for an invalid date, or None if it is valid.

    Past dates are allowed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return "Event date is required"
    try:
        parse_date(value)
    except InvalidDateError:
        return "Invalid date format"
    return None


def validate_event(title: t.Optional[str], date: t.Any) -> ValidationResult:
    """Validate every field and collect one message per invalid field."""
    errors: dict[str, str] = {}

    title_error = validate_title(title)
    if title_error:
        errors["title"] = title_error

    date_error = validate_date(date)
    if date_error:
        errors["date"] = date_error

    return ValidationResult(is_valid=not errors, errors=errors)
