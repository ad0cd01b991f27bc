"""
Email dispatcher for event reminders.

This module sends a reminder for one event through a third-party
transactional-email HTTP API. Dispatch is fire-and-forget relative to the
store mutation that triggered it: failures are logged and reported through
the result callback, never raised to the caller and never retried.
"""
from __future__ import annotations

import asyncio
import logging
import typing as t
from dataclasses import dataclass
from datetime import datetime

import httpx

from event_reminder.config import (
    EMAIL_API_KEY,
    EMAIL_API_URL,
    EMAIL_RECIPIENT,
    EMAIL_SENDER,
    EMAIL_TIMEOUT,
)
from event_reminder.countdown import format_countdown, get_countdown
from event_reminder.dates import format_date_long, format_date_relative
from event_reminder.models import EventRecord
from templates import render_template

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Outcome of one send attempt."""
    event_id: str
    ok: bool
    status_code: t.Optional[int] = None
    error: str = ""


ResultCallback = t.Callable[[DispatchResult], None]


def build_message(
        event: EventRecord,
        sender: str,
        recipient: str,
        now: t.Optional[datetime] = None,
) -> dict[str, str]:
    """Build the JSON payload for a reminder email."""
    today = (now or datetime.now()).date()
    fields = {
        "title": event.title,
        "date_long": format_date_long(event.date),
        "date_relative": format_date_relative(event.date, today),
        "countdown": format_countdown(get_countdown(event.date, now)),
        "description": event.description or "(no description)",
    }
    return {
        "from": sender,
        "to": recipient,
        "subject": render_template("reminder_email_subject", **fields).strip(),
        "text": render_template("reminder_email", **fields),
    }


class EmailDispatcher:
    """Sends reminder emails through a JSON HTTP API."""

    def __init__(
            self,
            api_url: str = EMAIL_API_URL,
            api_key: str = EMAIL_API_KEY,
            sender: str = EMAIL_SENDER,
            recipient: str = EMAIL_RECIPIENT,
            timeout: float = EMAIL_TIMEOUT,
            client: t.Optional[httpx.AsyncClient] = None,
            on_result: t.Optional[ResultCallback] = None,
    ) -> None:
        """
        :param api_url: Endpoint that accepts the message as a JSON POST.
        :param api_key: Sent as a bearer token when set.
        :param sender: From address.
        :param recipient: To address.
        :param timeout: Request timeout in seconds.
        :param client: Optional shared client; one is created per send otherwise.
        :param on_result: Called with every DispatchResult.
        """
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.recipient = recipient
        self.timeout = timeout
        self.on_result = on_result
        self._client = client
        self._pending: set[asyncio.Task] = set()

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.recipient)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _report(self, result: DispatchResult) -> DispatchResult:
        if result.ok:
            logger.info("Reminder sent for event %s", result.event_id)
        else:
            logger.error("Reminder for event %s failed: %s", result.event_id, result.error)
        if self.on_result is not None:
            try:
                self.on_result(result)
            except Exception:
                logger.exception("Dispatch result callback failed")
        return result

    async def _post(self, client: httpx.AsyncClient, payload: dict[str, str]) -> httpx.Response:
        response = await client.post(self.api_url, json=payload, headers=self._headers())
        response.raise_for_status()
        return response

    async def send(self, event: EventRecord) -> DispatchResult:
        """Send one reminder. Never raises for HTTP or transport failures."""
        if not self.configured:
            return self._report(DispatchResult(
                event_id=event.id, ok=False, error="Email dispatcher is not configured",
            ))

        payload = build_message(event, self.sender, self.recipient)
        try:
            if self._client is not None:
                response = await self._post(self._client, payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, payload)
        except httpx.TimeoutException:
            return self._report(DispatchResult(
                event_id=event.id, ok=False,
                error=f"Email API timed out after {self.timeout} seconds",
            ))
        except httpx.HTTPStatusError as e:
            return self._report(DispatchResult(
                event_id=event.id, ok=False, status_code=e.response.status_code,
                error=f"HTTP error from email API: {e.response.status_code} {e.response.text}",
            ))
        except httpx.HTTPError as e:
            return self._report(DispatchResult(
                event_id=event.id, ok=False, error=f"Error calling email API: {e}",
            ))

        return self._report(DispatchResult(
            event_id=event.id, ok=True, status_code=response.status_code,
        ))

    def dispatch(self, event: EventRecord) -> asyncio.Task:
        """Schedule ``send`` in the background and return immediately."""
        task = asyncio.get_running_loop().create_task(self.send(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every background send started by ``dispatch``."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
