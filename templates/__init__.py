"""Reminder email templates: ``.txt`` files with ``{placeholder}`` fields."""
from __future__ import annotations

import functools
import typing as t
from pathlib import Path

from event_reminder.errors import TemplateError

TEMPLATES_DIR = Path(__file__).resolve().parent


@functools.lru_cache(maxsize=None)
def _template_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateError(f"Cannot read template {path}: {e}") from e


def render_template(
        name: str,
        templates_dir: t.Union[str, Path, None] = None,
        **fields: t.Any,
) -> str:
    """Render ``<name>.txt`` with the given fields.

    :raises TemplateError: If the file cannot be read or a placeholder has
        no value.
    """
    path = Path(templates_dir or TEMPLATES_DIR) / f"{name}.txt"
    try:
        return _template_text(path).format_map(fields)
    except KeyError as e:
        raise TemplateError(f"Template '{name}' has no value for placeholder {e.args[0]!r}") from None
