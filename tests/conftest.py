"""Shared fixtures: a fixed call instant and an in-memory calendar."""

import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from appointments.calendar_providers.base import BusyInterval, CalendarEvent, CalendarProvider
from appointments.models.appointment import CallContext

LA = ZoneInfo("America/Los_Angeles")


class FakeCalendarProvider(CalendarProvider):
    """In-memory calendar recording every call made against it."""

    def __init__(self, busy=None, check_error=None, create_error=None,
                 check_delay=0.0, create_delay=0.0):
        self.busy: list[BusyInterval] = list(busy or [])
        self.check_error = check_error
        self.create_error = create_error
        self.check_delay = check_delay
        self.create_delay = create_delay
        self.check_calls: list[tuple[str, datetime, datetime]] = []
        self.created: list[CalendarEvent] = []

    async def get_busy_intervals(self, calendar_id, start, end):
        self.check_calls.append((calendar_id, start, end))
        # Snapshot at query time; the delay models response latency.
        overlapping = [b for b in self.busy if b.start < end and b.end > start]
        if self.check_delay:
            await asyncio.sleep(self.check_delay)
        if self.check_error:
            raise self.check_error
        return overlapping

    async def create_event(self, calendar_id, event):
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        if self.create_error:
            raise self.create_error
        self.created.append(event)
        self.busy.append(BusyInterval(start=event.start, end=event.end))
        return {"event_id": f"evt_{len(self.created)}", "html_link": ""}


@pytest.fixture
def la_tz():
    return LA


@pytest.fixture
def call_context():
    """Wednesday 2025-10-15, 10:00 in Los Angeles."""
    return CallContext(
        instant=datetime(2025, 10, 15, 10, 0, tzinfo=LA),
        timezone="America/Los_Angeles",
    )


@pytest.fixture
def fake_provider():
    return FakeCalendarProvider()
