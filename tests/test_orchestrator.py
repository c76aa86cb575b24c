"""Tests for the BookingOrchestrator check-then-create sequence."""

import asyncio
from datetime import datetime, timedelta

import pytest

from appointments.calendar_providers.base import BusyInterval, CalendarError
from appointments.models.appointment import AppointmentWindow, Contact
from appointments.models.outcomes import (
    AvailabilityCheckFailed,
    AwaitingConfirmation,
    Booked,
    Busy,
    CheckFailed,
    CreateFailed,
    Free,
    SlotBusy,
)
from appointments.orchestrator import BookingOrchestrator, build_event

from conftest import LA, FakeCalendarProvider

START = datetime(2025, 10, 20, 15, 0, tzinfo=LA)
WINDOW = AppointmentWindow(start=START, end=START + timedelta(minutes=30), timezone="America/Los_Angeles")
CONTACT = Contact(name="Jane Doe", email="jane@example.com", phone="+15551234567")


def _busy(offset_minutes, length_minutes):
    start = START + timedelta(minutes=offset_minutes)
    return BusyInterval(start=start, end=start + timedelta(minutes=length_minutes))


# ── Availability check ──────────────────────────────────────────────


class TestCheckAvailability:
    async def test_free(self, fake_provider):
        orch = BookingOrchestrator(fake_provider)
        assert isinstance(await orch.check_availability(WINDOW), Free)
        assert fake_provider.check_calls == [("primary", WINDOW.start, WINDOW.end)]

    async def test_overlap_is_busy(self):
        provider = FakeCalendarProvider(busy=[_busy(15, 60)])
        result = await BookingOrchestrator(provider).check_availability(WINDOW)
        assert isinstance(result, Busy)
        assert len(result.intervals) == 1

    async def test_adjacent_interval_is_not_busy(self):
        """Provider may report touching intervals; [start, end) does not overlap them."""
        provider = FakeCalendarProvider()
        provider.get_busy_intervals = _returns([_busy(-60, 60), _busy(30, 30)])
        result = await BookingOrchestrator(provider).check_availability(WINDOW)
        assert isinstance(result, Free)

    async def test_provider_error(self):
        provider = FakeCalendarProvider(check_error=CalendarError("notFound"))
        result = await BookingOrchestrator(provider).check_availability(WINDOW)
        assert isinstance(result, CheckFailed)
        assert "notFound" in result.cause

    async def test_timeout_is_its_own_cause(self):
        provider = FakeCalendarProvider(check_delay=1.0)
        result = await BookingOrchestrator(provider, timeout_seconds=0.01).check_availability(WINDOW)
        assert result == CheckFailed(cause="timeout")


def _returns(intervals):
    async def get_busy_intervals(calendar_id, start, end):
        return intervals
    return get_busy_intervals


# ── Full booking sequence ───────────────────────────────────────────


class TestBook:
    async def test_busy_never_creates(self):
        provider = FakeCalendarProvider(busy=[_busy(0, 30)])
        outcome = await BookingOrchestrator(provider).book(WINDOW, CONTACT, auto_book=True)
        assert isinstance(outcome, SlotBusy)
        assert provider.created == []

    async def test_free_without_auto_book_awaits_confirmation(self, fake_provider):
        outcome = await BookingOrchestrator(fake_provider).book(WINDOW, CONTACT)
        assert isinstance(outcome, AwaitingConfirmation)
        assert fake_provider.created == []

    async def test_free_with_auto_book_creates_once(self, fake_provider):
        outcome = await BookingOrchestrator(fake_provider).book(WINDOW, CONTACT, auto_book=True)
        assert outcome == Booked(event_id="evt_1")
        assert len(fake_provider.created) == 1
        assert fake_provider.created[0].attendees == ["jane@example.com"]

    async def test_create_failure_is_not_busy(self):
        provider = FakeCalendarProvider(create_error=RuntimeError("quota exceeded"))
        outcome = await BookingOrchestrator(provider).book(WINDOW, CONTACT, auto_book=True)
        assert isinstance(outcome, CreateFailed)
        assert "quota exceeded" in outcome.cause
        assert len(provider.check_calls) == 1

    async def test_create_timeout(self):
        provider = FakeCalendarProvider(create_delay=1.0)
        orch = BookingOrchestrator(provider, timeout_seconds=0.01)
        outcome = await orch.book(WINDOW, CONTACT, auto_book=True)
        assert outcome == CreateFailed(cause="timeout")

    async def test_check_failure_skips_create(self):
        provider = FakeCalendarProvider(check_error=ConnectionError("refused"))
        outcome = await BookingOrchestrator(provider).book(WINDOW, CONTACT, auto_book=True)
        assert isinstance(outcome, AvailabilityCheckFailed)
        assert provider.created == []

    async def test_missing_event_id(self, fake_provider):
        async def create_event(calendar_id, event):
            return {}
        fake_provider.create_event = create_event
        outcome = await BookingOrchestrator(fake_provider).book(WINDOW, CONTACT, auto_book=True)
        assert isinstance(outcome, CreateFailed)

    async def test_no_provider(self):
        outcome = await BookingOrchestrator(None).book(WINDOW, CONTACT, auto_book=True)
        assert outcome == AvailabilityCheckFailed(cause="calendar not configured")

    async def test_uses_configured_calendar(self, fake_provider):
        await BookingOrchestrator(fake_provider, calendar_id="office@example.com").book(WINDOW, CONTACT)
        assert fake_provider.check_calls[0][0] == "office@example.com"


# ── Concurrent bookings ─────────────────────────────────────────────


class TestConcurrentBookings:
    async def test_serialized_bookings_do_not_double_book(self):
        provider = FakeCalendarProvider(check_delay=0.02)
        orch = BookingOrchestrator(provider, serialize=True)
        outcomes = await asyncio.gather(
            orch.book(WINDOW, CONTACT, auto_book=True),
            orch.book(WINDOW, CONTACT, auto_book=True),
        )
        assert sum(isinstance(o, Booked) for o in outcomes) == 1
        assert sum(isinstance(o, SlotBusy) for o in outcomes) == 1
        assert len(provider.created) == 1

    async def test_unserialized_bookings_race(self):
        provider = FakeCalendarProvider(check_delay=0.02)
        orch = BookingOrchestrator(provider, serialize=False)
        outcomes = await asyncio.gather(
            orch.book(WINDOW, CONTACT, auto_book=True),
            orch.book(WINDOW, CONTACT, auto_book=True),
        )
        assert all(isinstance(o, Booked) for o in outcomes)
        assert len(provider.created) == 2


# ── Event payload ───────────────────────────────────────────────────


class TestBuildEvent:
    def test_contact_rendered_as_text(self):
        event = build_event(WINDOW, CONTACT)
        assert event.summary == "Appointment - Jane Doe"
        assert "Jane Doe" in event.description
        assert "+15551234567" in event.description
        assert "30 minutes" in event.description
        assert event.start == WINDOW.start and event.end == WINDOW.end
        assert event.timezone == "America/Los_Angeles"

    def test_no_email_no_attendee(self):
        event = build_event(WINDOW, Contact(name="<script>"))
        assert event.attendees == []
        assert "<script>" in event.summary

    def test_anonymous_caller(self):
        event = build_event(WINDOW, Contact())
        assert event.summary == "Appointment - Caller"
        assert "Not provided" in event.description
