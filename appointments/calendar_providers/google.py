"""Google Calendar provider implementation.

Uses a Google Cloud service account to interact with the Calendar API v3.
The service account key is either a path to the JSON key file or the JSON
document itself, read from ``GOOGLE_SERVICE_ACCOUNT_JSON`` when not passed in.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from functools import partial
from typing import Any

from dateutil.parser import isoparse
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from .base import BusyInterval, CalendarError, CalendarEvent, CalendarProvider

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


def _load_credentials(key: str) -> Credentials:
    """Build credentials from inline JSON or a key file path."""
    if key.lstrip().startswith("{"):
        return Credentials.from_service_account_info(json.loads(key), scopes=SCOPES)
    return Credentials.from_service_account_file(key, scopes=SCOPES)


class GoogleCalendarProvider(CalendarProvider):
    """CalendarProvider backed by Google Calendar API v3."""

    def __init__(self, service_account_json: str | None = None) -> None:
        key = service_account_json or os.environ.get(
            "GOOGLE_SERVICE_ACCOUNT_JSON", ""
        )
        if not key:
            raise ValueError(
                "Google service account key must be provided via "
                "constructor argument or GOOGLE_SERVICE_ACCOUNT_JSON env var."
            )
        self._credentials = _load_credentials(key)
        self._service = build(
            "calendar", "v3", credentials=self._credentials, cache_discovery=False
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_in_executor(self, func, *args, **kwargs) -> Any:
        """Run a synchronous Google API call in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(func, *args, **kwargs)
        )

    @staticmethod
    def _to_rfc3339(dt: datetime) -> str:
        """Convert a datetime to an RFC 3339 string with timezone."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.isoformat()

    # ------------------------------------------------------------------
    # CalendarProvider interface
    # ------------------------------------------------------------------

    async def get_busy_intervals(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
    ) -> list[BusyInterval]:
        """Query the Google freebusy API for ``[start, end)``.

        Per-calendar errors (unknown calendar, no access) come back inside
        a 200 response, so they are raised here as CalendarError rather
        than read as an empty, i.e. free, calendar.
        """
        body = {
            "timeMin": self._to_rfc3339(start),
            "timeMax": self._to_rfc3339(end),
            "items": [{"id": calendar_id}],
        }

        response = await self._run_in_executor(
            self._service.freebusy().query(body=body).execute
        )

        calendar = response.get("calendars", {}).get(calendar_id, {})
        errors = calendar.get("errors") or []
        if errors:
            reasons = ", ".join(err.get("reason", "unknown") for err in errors)
            raise CalendarError(f"freebusy query failed for {calendar_id}: {reasons}")

        busy = [
            BusyInterval(start=isoparse(item["start"]), end=isoparse(item["end"]))
            for item in calendar.get("busy", [])
        ]
        busy.sort(key=lambda b: b.start)
        return busy

    async def create_event(
        self, calendar_id: str, event: CalendarEvent
    ) -> dict:
        """Insert an event into the Google Calendar.

        Sends email invitations to any attendees listed on the event.
        """
        start: dict[str, str] = {"dateTime": self._to_rfc3339(event.start)}
        end: dict[str, str] = {"dateTime": self._to_rfc3339(event.end)}
        if event.timezone:
            start["timeZone"] = event.timezone
            end["timeZone"] = event.timezone

        body: dict[str, Any] = {
            "summary": event.summary,
            "start": start,
            "end": end,
        }
        if event.description:
            body["description"] = event.description
        if event.attendees:
            body["attendees"] = [
                {"email": addr} for addr in event.attendees
            ]

        result = await self._run_in_executor(
            self._service.events()
            .insert(
                calendarId=calendar_id,
                body=body,
                sendUpdates="all" if event.attendees else "none",
            )
            .execute
        )

        logger.info("Created event %s on calendar %s", result["id"], calendar_id)

        return {
            "event_id": result["id"],
            "html_link": result.get("htmlLink", ""),
            "status": result.get("status", "confirmed"),
        }
