# -*- coding: utf-8 -*-
"""Plain-text table of events, shared by the MCP tools and the REST service."""
from __future__ import annotations

from event_reminder.models import EventView


def format_events_table(views: list[EventView]) -> str:
    """Format event views as a clean table.

    :param views: Views in display order.
    :return: Formatted table string of all events.
    """
    if not views:
        return "📅 No events found."

    lines = []
    lines.append("📅 EVENTS")
    lines.append("=" * 100)
    lines.append(f"{'#':<4} {'Title':<35} {'Date':<20} {'Status':<10} {'When':<14} {'Countdown':<15}")
    lines.append("-" * 100)

    for idx, view in enumerate(views, 1):
        title = view.event.title[:34] if len(view.event.title) > 34 else view.event.title
        countdown = view.countdown_text or "—"
        lines.append(
            f"{idx:<4} {title:<35} {view.date_long:<20} {view.status_label:<10} "
            f"{view.date_relative:<14} {countdown:<15}"
        )

    lines.append("=" * 100)
    lines.append(f"Total: {len(views)} event(s)")
    return "\n".join(lines)
