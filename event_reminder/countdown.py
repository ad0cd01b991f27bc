"""Countdown until an event's date, and its compact text form."""
from __future__ import annotations

import typing as t
from datetime import datetime

from event_reminder.dates import DateLike, date_to_midnight
from event_reminder.models import Countdown

PAST_SENTINEL = "Event has passed"

SECONDS_PER_DAY = 24 * 60 * 60
SECONDS_PER_HOUR = 60 * 60
SECONDS_PER_MINUTE = 60


def get_countdown(value: DateLike, now: t.Optional[datetime] = None) -> Countdown:
    """Time left until midnight of the event date.

    Each unit is truncated, never rounded. At or after the event moment the
    result is marked past with every field zero.

    :param value: The event date.
    :param now: Current wall-clock time. Defaults to ``datetime.now()``.
    :return: A Countdown.
    """
    target = date_to_midnight(value)
    delta = (target - (now or datetime.now())).total_seconds()
    if delta <= 0:
        return Countdown(is_past=True)

    remaining = int(delta)

    days, remaining = divmod(remaining, SECONDS_PER_DAY)
    hours, remaining = divmod(remaining, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remaining, SECONDS_PER_MINUTE)

    return Countdown(days=days, hours=hours, minutes=minutes, seconds=seconds)


def format_countdown(countdown: Countdown) -> str:
    """Format a countdown as e.g. ``"2d 0h 5m 30s"``.

    Leading zero units are dropped, but once a coarser unit is shown every
    finer unit is shown too. Seconds are always shown.
    """
    if countdown.is_past:
        return PAST_SENTINEL

    parts = []
    if countdown.days > 0:
        parts.append(f"{countdown.days}d")
    if countdown.hours > 0 or countdown.days > 0:
        parts.append(f"{countdown.hours}h")
    if countdown.minutes > 0 or countdown.hours > 0 or countdown.days > 0:
        parts.append(f"{countdown.minutes}m")
    parts.append(f"{countdown.seconds}s")

    return " ".join(parts)
