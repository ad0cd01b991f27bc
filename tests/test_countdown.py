"""Tests for the countdown calculator."""
from datetime import datetime

from event_reminder.countdown import PAST_SENTINEL, format_countdown, get_countdown
from event_reminder.models import Countdown


def test_countdown_splits_into_units() -> None:
    """A day and a half before midnight of the event date."""
    countdown = get_countdown("2026-01-10", datetime(2026, 1, 8, 12, 0, 0))
    assert countdown == Countdown(days=1, hours=12, minutes=0, seconds=0, is_past=False)
    assert format_countdown(countdown) == "1d 12h 0m 0s"


def test_countdown_truncates_each_unit() -> None:
    """Fractions of a second are dropped, never rounded up."""
    countdown = get_countdown("2026-01-10", datetime(2026, 1, 9, 23, 54, 29, 600000))
    assert countdown == Countdown(days=0, hours=0, minutes=5, seconds=30)


def test_countdown_is_past_at_and_after_event_moment() -> None:
    """At midnight of the event date, and any time after, the event has passed."""
    at_moment = get_countdown("2026-01-10", datetime(2026, 1, 10, 0, 0, 0))
    later = get_countdown("2026-01-10", datetime(2026, 1, 12, 8, 0, 0))
    assert at_moment == Countdown(is_past=True)
    assert later == Countdown(is_past=True)


def test_format_countdown_keeps_inner_zero_units() -> None:
    """Once days are shown, hours and minutes are shown even when zero."""
    assert format_countdown(Countdown(days=2, hours=0, minutes=5, seconds=30)) == "2d 0h 5m 30s"
    assert format_countdown(Countdown(days=0, hours=3, minutes=0, seconds=0)) == "3h 0m 0s"


def test_format_countdown_drops_leading_zero_units() -> None:
    assert format_countdown(Countdown(minutes=5, seconds=3)) == "5m 3s"
    assert format_countdown(Countdown(seconds=42)) == "42s"
    assert format_countdown(Countdown()) == "0s"


def test_format_countdown_past_sentinel() -> None:
    assert format_countdown(Countdown(is_past=True)) == PAST_SENTINEL == "Event has passed"
