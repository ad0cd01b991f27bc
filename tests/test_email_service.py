"""Tests for the email dispatcher and the reminder job.

HTTP traffic is served by httpx.MockTransport; nothing leaves the process.
"""
import asyncio
import json

import httpx
import pytest

from event_reminder.models import EventRecord
from event_reminder.reminders import NotificationPolicy
from event_reminder.storage import MemoryKeyValueStore
from event_reminder.store import EventStore
from notifications.email_service import DispatchResult, EmailDispatcher, build_message
from notifications.reminder_job import notify_on_change, send_due_reminders

from conftest import FixedClock

API_URL = "https://mail.example.test/send"


def make_dispatcher(handler, results: list[DispatchResult], **kwargs) -> EmailDispatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EmailDispatcher(
        api_url=API_URL,
        api_key="secret-key",
        sender="reminders@example.test",
        recipient="me@example.test",
        client=client,
        on_result=results.append,
        **kwargs,
    )


def sample_event() -> EventRecord:
    return EventRecord(
        id="event_1",
        title="Dentist",
        date="2026-01-11",
        description="Bring forms",
        created_at="2026-01-01T00:00:00",
    )


def test_build_message_renders_templates() -> None:
    from datetime import datetime

    message = build_message(sample_event(), "from@x.test", "to@x.test", now=datetime(2026, 1, 10, 12, 0))
    assert message["from"] == "from@x.test"
    assert message["to"] == "to@x.test"
    assert message["subject"] == "Reminder: Dentist (Tomorrow)"
    assert "January 11, 2026" in message["text"]
    assert "12h 0m 0s" in message["text"]
    assert "Bring forms" in message["text"]


@pytest.mark.asyncio
async def test_send_posts_json_with_bearer_token() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "msg-1"})

    results: list[DispatchResult] = []
    result = await make_dispatcher(handler, results).send(sample_event())

    assert result == DispatchResult(event_id="event_1", ok=True, status_code=200)
    assert results == [result]
    assert len(requests) == 1
    sent = requests[0]
    assert str(sent.url) == API_URL
    assert sent.headers["Authorization"] == "Bearer secret-key"
    payload = json.loads(sent.content)
    assert payload["to"] == "me@example.test"
    assert payload["subject"].startswith("Reminder: Dentist")


@pytest.mark.asyncio
async def test_send_reports_http_errors_without_raising() -> None:
    results: list[DispatchResult] = []
    dispatcher = make_dispatcher(lambda request: httpx.Response(503, text="busy"), results)

    result = await dispatcher.send(sample_event())

    assert result.ok is False
    assert result.status_code == 503
    assert "503" in result.error
    assert results == [result]


@pytest.mark.asyncio
async def test_send_reports_transport_errors_without_raising() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    results: list[DispatchResult] = []
    result = await make_dispatcher(handler, results).send(sample_event())
    assert result.ok is False
    assert "connection refused" in result.error


@pytest.mark.asyncio
async def test_unconfigured_dispatcher_fails_fast() -> None:
    results: list[DispatchResult] = []
    dispatcher = EmailDispatcher(api_url=API_URL, recipient="", on_result=results.append)
    result = await dispatcher.send(sample_event())
    assert result.ok is False
    assert "not configured" in result.error
    assert results == [result]


@pytest.mark.asyncio
async def test_dispatch_is_fire_and_forget() -> None:
    """dispatch() returns before the request completes; the outcome arrives via the callback."""
    release = asyncio.Event()

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return httpx.Response(200)

    results: list[DispatchResult] = []
    client = httpx.AsyncClient(transport=httpx.MockTransport(slow_handler))
    dispatcher = EmailDispatcher(api_url=API_URL, recipient="me@example.test", client=client, on_result=results.append)

    task = dispatcher.dispatch(sample_event())
    await asyncio.sleep(0)
    assert results == []
    assert not task.done()

    release.set()
    await dispatcher.drain()
    assert [result.ok for result in results] == [True]


@pytest.mark.asyncio
async def test_send_due_reminders_records_only_successes(kv: MemoryKeyValueStore, clock: FixedClock) -> None:
    """Failed sends are reported and not retried, and stay due for the next run."""
    store = EventStore(kv, clock=clock)
    ok_event = store.add("Works", "2026-01-10")
    bad_event = store.add("Fails", "2026-01-11")
    store.add("Far away", "2026-03-01")

    attempts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        subject = json.loads(request.content)["subject"]
        attempts.append(subject)
        return httpx.Response(500 if "Fails" in subject else 200)

    results: list[DispatchResult] = []
    policy = NotificationPolicy(kv, clock=clock)
    outcome = await send_due_reminders(store, policy, make_dispatcher(handler, results))

    assert [(result.event_id, result.ok) for result in outcome] == [(ok_event.id, True), (bad_event.id, False)]
    assert len(attempts) == 2
    assert not policy.is_due(ok_event)
    assert policy.is_due(bad_event)


@pytest.mark.asyncio
async def test_failed_dispatch_does_not_roll_back_mutation(kv: MemoryKeyValueStore, clock: FixedClock) -> None:
    """The store mutation stands whatever happens to the notification."""
    store = EventStore(kv, clock=clock)
    results: list[DispatchResult] = []
    dispatcher = make_dispatcher(lambda request: httpx.Response(500), results)
    policy = NotificationPolicy(kv, clock=clock)
    notify_on_change(store, policy, dispatcher)

    event = store.add("Due tomorrow", "2026-01-11")
    store.add("Not due", "2026-02-11")
    await dispatcher.drain()

    assert store.get_by_id(event.id) == event
    assert store.count() == 2
    assert [(result.event_id, result.ok) for result in results] == [(event.id, False)]
    assert policy.is_due(event)


@pytest.mark.asyncio
async def test_successful_dispatch_on_change_is_recorded(kv: MemoryKeyValueStore, clock: FixedClock) -> None:
    store = EventStore(kv, clock=clock)
    results: list[DispatchResult] = []
    dispatcher = make_dispatcher(lambda request: httpx.Response(202), results)
    policy = NotificationPolicy(kv, clock=clock)
    notify_on_change(store, policy, dispatcher)

    event = store.add("Due today", "2026-01-10")
    await dispatcher.drain()
    await asyncio.sleep(0)

    assert results[0].ok is True
    assert not policy.is_due(event)


def test_notify_on_change_without_event_loop_is_harmless(kv: MemoryKeyValueStore, clock: FixedClock) -> None:
    store = EventStore(kv, clock=clock)
    results: list[DispatchResult] = []
    notify_on_change(store, NotificationPolicy(kv, clock=clock), make_dispatcher(lambda r: httpx.Response(200), results))

    event = store.add("Due today", "2026-01-10")
    assert store.get_by_id(event.id) == event
    assert results == []
