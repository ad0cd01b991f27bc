"""Shared fixtures: an in-memory key-value store and a controllable clock."""
import typing as t
from datetime import datetime, timedelta

import pytest

from event_reminder.storage import MemoryKeyValueStore
from event_reminder.store import EventStore


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: t.Any) -> None:
        self.now = self.now + timedelta(**kwargs)


def sequential_ids(prefix: str = "event") -> t.Callable[[], str]:
    """Id factory producing event_1, event_2, ..."""
    counter = iter(range(1, 1_000_000))
    return lambda: f"{prefix}_{next(counter)}"


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 10, 9, 30, 0))


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv: MemoryKeyValueStore, clock: FixedClock) -> EventStore:
    return EventStore(kv, clock=clock, id_factory=sequential_ids())
