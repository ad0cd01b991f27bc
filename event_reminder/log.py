"""Logging setup shared by the CLI and the services."""
from __future__ import annotations

import logging
import typing as t

from rich.console import Console
from rich.logging import RichHandler

from event_reminder.config import LOG_LEVEL


def configure_logging(level: t.Optional[str] = None, console: t.Optional[Console] = None) -> None:
    """Route the root logger through a single RichHandler.

    Calling this more than once replaces the previous handler rather than
    stacking another one.

    :param level: Log level name. Defaults to EVENT_REMINDER_LOG_LEVEL.
    :param console: Console to write to. Defaults to stderr.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel((level or LOG_LEVEL).upper())
