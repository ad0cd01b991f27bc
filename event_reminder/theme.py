"""Persisted light/dark theme preference."""
from __future__ import annotations

import logging
import typing as t

from event_reminder.config import THEME_STORAGE_KEY
from event_reminder.errors import PersistenceError
from event_reminder.storage import KeyValueStore

logger = logging.getLogger(__name__)

Theme = t.Literal["light", "dark"]
THEMES: tuple[Theme, ...] = ("light", "dark")


class ThemePreference:
    """The saved theme, or the system preference when nothing is saved."""

    def __init__(self, kv: KeyValueStore, system_prefers_dark: bool = False) -> None:
        self._kv = kv
        self.current: Theme = "dark" if system_prefers_dark else "light"
        try:
            saved = kv.get(THEME_STORAGE_KEY)
        except PersistenceError as e:
            logger.error("Error loading theme: %s", e)
            saved = None
        if saved in THEMES:
            self.current = saved

    def set(self, theme: Theme) -> bool:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        self.current = theme
        return self._kv.set(THEME_STORAGE_KEY, theme)

    def toggle(self) -> Theme:
        self.set("dark" if self.current == "light" else "light")
        return self.current
