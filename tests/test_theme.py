"""Tests for the saved light/dark theme preference."""
import pytest

from event_reminder.storage import MemoryKeyValueStore
from event_reminder.theme import ThemePreference


def test_theme_defaults_to_system_preference() -> None:
    assert ThemePreference(MemoryKeyValueStore()).current == "light"
    assert ThemePreference(MemoryKeyValueStore(), system_prefers_dark=True).current == "dark"


def test_theme_toggle_persists() -> None:
    kv = MemoryKeyValueStore()
    preference = ThemePreference(kv)
    assert preference.toggle() == "dark"
    assert ThemePreference(kv).current == "dark"
    assert preference.toggle() == "light"
    assert kv.data["eventReminder_theme"] == "light"


def test_theme_rejects_unknown_values() -> None:
    kv = MemoryKeyValueStore({"eventReminder_theme": "purple"})
    preference = ThemePreference(kv)
    assert preference.current == "light"
    with pytest.raises(ValueError):
        preference.set("purple")
