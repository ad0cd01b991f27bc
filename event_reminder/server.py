# -*- coding: utf-8 -*-
import typing as t
from datetime import datetime

from fastmcp import FastMCP

from event_reminder.config import DATA_FILE
from event_reminder.formatting import format_events_table
from event_reminder.models import EventRecord
from event_reminder.storage import JsonFileKeyValueStore
from event_reminder.store import EventStore
from event_reminder.sync import ViewSynchronizer


class EventTools:
    """MCP tool implementations bound to one event store."""

    def __init__(self, store: EventStore, clock: t.Optional[t.Callable[[], datetime]] = None) -> None:
        self.store = store
        self.views = ViewSynchronizer(store, clock=clock)

    def add_event(
            self,
            title: str,
            date: str,
            description: str = ""
    ) -> EventRecord:
        """Adds an event.

        :param title: Title of the event, 3 to 100 characters.
        :param date: Date of the event in YYYY-MM-DD format.
        :param description: Description of the event (optional).
        :return: The stored EventRecord.
        """
        return self.store.add(title, date, description)

    def update_event(
            self,
            event_id: str,
            title: str,
            date: str,
            description: str = ""
    ) -> EventRecord:
        """Updates the title, date and description of an event.

        :param event_id: Id of the event to update.
        :param title: New title.
        :param date: New date in YYYY-MM-DD format.
        :param description: New description (optional).
        :return: The updated EventRecord.
        """
        return self.store.update(event_id, title, date, description)

    def delete_event(self, event_id: str) -> bool:
        """Deletes an event.

        :param event_id: Id of the event to delete.
        :return: True if an event was removed.
        """
        return self.store.delete(event_id)

    def list_events(self) -> list[EventRecord]:
        """Lists all events ordered by date.

        :return: A list of EventRecord objects.
        """
        return self.store.list_sorted()

    def show_events(self) -> str:
        """Displays all events with their status and countdown as a table.

        :return: Formatted table of all events, or a message if there are none.
        """
        return format_events_table(self.views.compute())


def create_server(store: EventStore) -> FastMCP:
    """Build an MCP server whose tools operate on ``store``."""
    tools = EventTools(store)
    mcp = FastMCP("EventReminder")
    for tool in (
            tools.add_event,
            tools.update_event,
            tools.delete_event,
            tools.list_events,
            tools.show_events,
    ):
        mcp.tool(tool)
    return mcp


if __name__ == "__main__":
    create_server(EventStore(JsonFileKeyValueStore(DATA_FILE))).run()
