# -*- coding: utf-8 -*-
"""
Key-value stores used as the durable mirror of in-memory state.

The core treats keys as opaque strings and values as serialized JSON text.
``get`` may raise PersistenceError; ``set`` reports failure by returning
False so that callers keep their in-memory state authoritative.
"""
from __future__ import annotations

import json
import logging
import os
import typing as t
from pathlib import Path

from event_reminder.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(t.Protocol):
    """Minimal persistent key-value interface."""

    def get(self, key: str) -> t.Optional[str]:
        ...

    def set(self, key: str, value: str) -> bool:
        ...

    def clear(self) -> None:
        ...


class MemoryKeyValueStore:
    """Dict-backed store. ``fail_reads``/``fail_writes`` simulate a broken backend."""

    def __init__(self, initial: t.Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> t.Optional[str]:
        if self.fail_reads:
            raise PersistenceError(f"Read of '{key}' failed")
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        if self.fail_writes:
            return False
        self.data[key] = value
        return True

    def clear(self) -> None:
        self.data.clear()


class JsonFileKeyValueStore:
    """Stores every key in a single JSON object file.

    The file is re-read on every ``get`` so several processes (CLI, service)
    can share it. Writes go to a temporary file first and are then moved into
    place, so a crash never leaves a half-written file behind. An unreadable
    file is moved to ``<name>.corrupt`` before the first write replaces it.
    """

    def __init__(self, path: t.Union[str, Path]) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Error reading {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Error reading {self.path}: expected a JSON object")
        return data

    def get(self, key: str) -> t.Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> bool:
        try:
            data = self._read_all()
        except PersistenceError as e:
            corrupt_path = self.path.with_suffix(self.path.suffix + ".corrupt")
            try:
                os.replace(self.path, corrupt_path)
            except OSError as move_error:
                logger.error("Could not move unreadable %s aside: %s", self.path, move_error)
                return False
            logger.warning("%s; moved it to %s and starting a new file", e, corrupt_path)
            data = {}
        data[key] = value

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Error writing %s: %s", self.path, e)
            return False
        return True

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(f"Error clearing {self.path}: {e}") from e
