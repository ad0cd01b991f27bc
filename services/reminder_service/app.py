"""
FastAPI service for event reminder operations.

This service exposes the event store, the temporal classifier and the
countdown calculator as REST API endpoints. The store is backed by the JSON
data file unless one is injected through ``create_app``.
"""
from __future__ import annotations

import json
import logging
import typing as t
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Request

from event_reminder.config import DATA_FILE, REMINDER_SERVICE_PORT
from event_reminder.errors import NotFoundError, ValidationError
from event_reminder.formatting import format_events_table
from event_reminder.log import configure_logging
from event_reminder.storage import JsonFileKeyValueStore
from event_reminder.store import EventStore
from event_reminder.sync import ViewSynchronizer
from services.shared.models import (
    DeleteEventResponse,
    Event,
    EventRequest,
    EventViewModel,
    ImportEventsRequest,
    ImportEventsResponse,
    ShowEventsResponse,
)

logger = logging.getLogger(__name__)


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def get_views(request: Request) -> ViewSynchronizer:
    return request.app.state.views


def _validation_error(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail={"errors": e.errors})


def create_app(
        store: t.Optional[EventStore] = None,
        clock: t.Optional[t.Callable[[], datetime]] = None,
) -> FastAPI:
    """Build the service around an event store.

    :param store: Store to serve. Defaults to one backed by DATA_FILE,
        created on startup.
    :param clock: Clock used for status and countdown output.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the default store on startup if none was injected."""
        if app.state.store is None:
            configure_logging()
            app.state.store = EventStore(JsonFileKeyValueStore(DATA_FILE))
            app.state.views = ViewSynchronizer(app.state.store, clock=clock)
            logger.info("Serving %d event(s) from %s", app.state.store.count(), DATA_FILE)
        yield
        await app.state.views.aclose()

    app = FastAPI(
        title="Event Reminder Service",
        description="REST API for event management, status and countdowns",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.views = ViewSynchronizer(store, clock=clock) if store is not None else None

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {"status": "healthy", "service": "event-reminder-service"}

    @app.get("/events", response_model=list[Event])
    async def list_events(store: EventStore = Depends(get_store)) -> list[Event]:
        """
        List all events ordered by date.

        Events on the same date keep the order they were added in.
        """
        return [Event.from_record(record) for record in store.list_sorted()]

    @app.post("/events", response_model=Event, status_code=201)
    async def create_event(request: EventRequest, store: EventStore = Depends(get_store)) -> Event:
        """Create a single event."""
        try:
            record = store.add(request.title, request.date, request.description)
        except ValidationError as e:
            raise _validation_error(e)
        return Event.from_record(record)

    @app.get("/events/views", response_model=list[EventViewModel])
    async def list_event_views(views: ViewSynchronizer = Depends(get_views)) -> list[EventViewModel]:
        """
        List all events with their status, relative date and countdown.

        Values are computed at request time.
        """
        return [EventViewModel.from_view(view) for view in views.compute()]

    @app.get("/events/show", response_model=ShowEventsResponse)
    async def show_events(views: ViewSynchronizer = Depends(get_views)) -> ShowEventsResponse:
        """Show all events in a formatted table."""
        return ShowEventsResponse(formatted_events=format_events_table(views.compute()))

    @app.get("/events/{event_id}", response_model=Event)
    async def get_event(event_id: str, store: EventStore = Depends(get_store)) -> Event:
        """Get one event by id."""
        record = store.get_by_id(event_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Event '{event_id}' not found")
        return Event.from_record(record)

    @app.put("/events/{event_id}", response_model=Event)
    async def update_event(
            event_id: str,
            request: EventRequest,
            store: EventStore = Depends(get_store),
    ) -> Event:
        """Replace the title, date and description of an event."""
        try:
            record = store.update(event_id, request.title, request.date, request.description)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValidationError as e:
            raise _validation_error(e)
        return Event.from_record(record)

    @app.delete("/events/{event_id}", response_model=DeleteEventResponse)
    async def delete_event(event_id: str, store: EventStore = Depends(get_store)) -> DeleteEventResponse:
        """
        Delete an event.

        Deleting an unknown id is not an error; ``deleted`` is false.
        """
        return DeleteEventResponse(deleted=store.delete(event_id))

    @app.get("/export", response_model=list[Event])
    async def export_events(store: EventStore = Depends(get_store)) -> list[Event]:
        """Export every event in the persisted format."""
        return [Event(**item) for item in json.loads(store.export_json())]

    @app.post("/import", response_model=ImportEventsResponse)
    async def import_events(
            request: ImportEventsRequest,
            store: EventStore = Depends(get_store),
    ) -> ImportEventsResponse:
        """Import previously exported events."""
        try:
            imported = store.import_json(json.dumps(request.events), replace_existing=request.replace)
        except ValidationError as e:
            raise _validation_error(e)
        return ImportEventsResponse(imported=imported, total=store.count())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=REMINDER_SERVICE_PORT)
