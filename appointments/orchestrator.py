"""Booking orchestrator: availability check, then optional event creation.

    Built -> CheckingAvailability -> SlotBusy
                                  -> Free -> Creating -> Booked | CreateFailed   (auto_book)
                                          -> AwaitingConfirmation               (no auto_book)

Creation is only ever attempted after a Free result in the same call.
Both calendar calls are single attempts bounded by a timeout.

Two requests for overlapping windows can both see Free and both create.
With ``serialize`` on, check+create for one calendar id runs under an
``asyncio.Lock``, which closes the gap within this process only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from appointments.calendar_providers.base import CalendarEvent, CalendarProvider
from appointments.formatting import redact_pii
from appointments.models.appointment import AppointmentWindow, Contact
from appointments.models.outcomes import (
    AvailabilityCheckFailed,
    AvailabilityResult,
    AwaitingConfirmation,
    Booked,
    BookingOutcome,
    Busy,
    CheckFailed,
    CreateFailed,
    Created,
    CreationFailed,
    CreationResult,
    Free,
    SlotBusy,
)

log = logging.getLogger("appointments.orchestrator")

NOT_CONFIGURED = "calendar not configured"


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timeout"
    return f"{type(exc).__name__}: {exc}"


def build_event(window: AppointmentWindow, contact: Contact) -> CalendarEvent:
    """Event payload for a booking. Contact fields are copied as plain text."""
    name = contact.name or "Caller"
    lines = [
        f"Name: {contact.name or 'Unknown'}",
        f"Email: {contact.email or 'Not provided'}",
        f"Phone: {contact.phone or 'Not provided'}",
        f"Duration: {window.duration_minutes} minutes",
        "Booked by the phone assistant.",
    ]
    return CalendarEvent(
        summary=f"Appointment - {name}",
        start=window.start,
        end=window.end,
        description="\n".join(lines),
        attendees=[contact.email] if contact.email else [],
        timezone=window.timezone,
    )


class BookingOrchestrator:
    """Runs the calendar side of one booking request."""

    def __init__(
        self,
        provider: Optional[CalendarProvider],
        calendar_id: str = "primary",
        timeout_seconds: float = 10.0,
        serialize: bool = True,
    ) -> None:
        self._provider = provider
        self._calendar_id = calendar_id
        self._timeout = timeout_seconds
        self._serialize = serialize
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, calendar_id: str) -> asyncio.Lock:
        lock = self._locks.get(calendar_id)
        if lock is None:
            lock = self._locks[calendar_id] = asyncio.Lock()
        return lock

    async def check_availability(self, window: AppointmentWindow) -> AvailabilityResult:
        """Query busy time for ``[start, end)``; any overlap means Busy."""
        if self._provider is None:
            return CheckFailed(cause=NOT_CONFIGURED)
        try:
            intervals = await asyncio.wait_for(
                self._provider.get_busy_intervals(
                    self._calendar_id, window.start, window.end
                ),
                timeout=self._timeout,
            )
        except Exception as exc:
            log.warning("Availability check failed for %s: %s", self._calendar_id, _describe(exc))
            return CheckFailed(cause=_describe(exc))

        overlapping = [b for b in intervals if window.overlaps(b.start, b.end)]
        if overlapping:
            return Busy(intervals=overlapping)
        return Free()

    async def create(self, window: AppointmentWindow, contact: Contact) -> CreationResult:
        """Single create-event attempt, no retry."""
        if self._provider is None:
            return CreationFailed(cause=NOT_CONFIGURED)
        event = build_event(window, contact)
        try:
            result = await asyncio.wait_for(
                self._provider.create_event(self._calendar_id, event),
                timeout=self._timeout,
            )
        except Exception as exc:
            log.error("Event creation failed on %s: %s", self._calendar_id, _describe(exc))
            return CreationFailed(cause=_describe(exc))

        event_id = result.get("event_id") if isinstance(result, dict) else None
        if not event_id:
            return CreationFailed(cause="calendar returned no event id")
        return Created(event_id=str(event_id), html_link=result.get("html_link", ""))

    async def book(
        self,
        window: AppointmentWindow,
        contact: Contact,
        auto_book: bool = False,
    ) -> BookingOutcome:
        if self._serialize and auto_book:
            async with self._lock_for(self._calendar_id):
                return await self._run(window, contact, auto_book)
        return await self._run(window, contact, auto_book)

    async def _run(
        self,
        window: AppointmentWindow,
        contact: Contact,
        auto_book: bool,
    ) -> BookingOutcome:
        availability = await self.check_availability(window)

        if isinstance(availability, CheckFailed):
            return AvailabilityCheckFailed(cause=availability.cause)
        if isinstance(availability, Busy):
            log.info(
                "Slot %s busy (%d overlapping interval(s))",
                window.start.isoformat(),
                len(availability.intervals),
            )
            return SlotBusy(intervals=availability.intervals)
        if not auto_book:
            return AwaitingConfirmation()

        creation = await self.create(window, contact)
        if isinstance(creation, CreationFailed):
            return CreateFailed(cause=creation.cause)

        log.info(
            "Booked %s for %s (event %s)",
            window.start.isoformat(),
            redact_pii(contact.name),
            creation.event_id,
        )
        return Booked(event_id=creation.event_id, html_link=creation.html_link)
