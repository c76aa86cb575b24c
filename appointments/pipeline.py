"""Request pipeline for the check-availability tool.

  payload -> CallContext -> date / time / duration -> window
          -> past check -> orchestrator -> BookingResponse

Every failure is turned into a well-formed response; nothing raises out
of ``handle_check_availability``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from appointments.config import Settings
from appointments.formatting import (
    GENERIC_ERROR_MESSAGE,
    appointment_summary,
    call_summary,
    outcome_message,
    redact_pii,
)
from appointments.models.appointment import AppointmentWindow, Contact
from appointments.models.booking import BookingRequest, BookingResponse, CallSummary
from appointments.models.outcomes import (
    AvailabilityCheckFailed,
    AwaitingConfirmation,
    Booked,
    BookingOutcome,
    CreateFailed,
    ParseFailure,
    PastWindow,
)
from appointments.orchestrator import BookingOrchestrator
from appointments.resolvers import (
    build_window,
    resolve_call_context,
    resolve_date,
    resolve_duration,
    resolve_time,
)

log = logging.getLogger("appointments.pipeline")

_FREE_OUTCOMES = (Booked, AwaitingConfirmation, CreateFailed)


def render_response(
    outcome: BookingOutcome,
    window: Optional[AppointmentWindow] = None,
    call: Optional[CallSummary] = None,
) -> BookingResponse:
    """Map an outcome onto the response contract."""
    response = BookingResponse(
        is_free=isinstance(outcome, _FREE_OUTCOMES),
        event_id=outcome.event_id if isinstance(outcome, Booked) else None,
        message=outcome_message(outcome, window),
        appointment=appointment_summary(window) if window is not None else None,
        call=call,
    )
    if isinstance(outcome, Booked) and outcome.html_link:
        response.html_link = outcome.html_link
    if isinstance(outcome, ParseFailure):
        response.need = list(outcome.need)
        response.error = f"could not parse {outcome.reason}"
    elif isinstance(outcome, (AvailabilityCheckFailed, CreateFailed)):
        response.error = outcome.cause
    elif isinstance(outcome, PastWindow):
        response.error = "requested time is in the past"
    return response


async def handle_check_availability(
    payload: Any,
    settings: Settings,
    orchestrator: BookingOrchestrator,
    header_timestamp: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BookingResponse:
    """Resolve the requested slot, check the calendar and optionally book it."""
    try:
        request = BookingRequest.model_validate(payload if isinstance(payload, dict) else {})
        tz = settings.tz

        context = resolve_call_context(header_timestamp, request.call_timestamp, tz, now=now)
        date_resolution = resolve_date(request.date, context)
        time_of_day = resolve_time(request.time)
        duration = resolve_duration(request.duration, settings.default_duration_minutes)
        contact = Contact(
            name=request.customer_name,
            email=request.customer_email,
            phone=request.customer_phone,
        )
        call = call_summary(context)

        log.info(
            "Availability request date=%r time=%r duration=%d caller=%s auto_book=%s",
            request.date,
            request.time,
            duration,
            redact_pii(contact.name),
            request.auto_book,
        )

        window = build_window(date_resolution, time_of_day, duration, tz, context)
        if isinstance(window, ParseFailure):
            log.info("Parse failure, need: %s", window.need)
            return render_response(window, call=call)

        if window.is_past(context):
            return render_response(PastWindow(), window, call=call)

        outcome = await orchestrator.book(window, contact, auto_book=request.auto_book)
        log.info("Outcome for %s: %s", window.start.isoformat(), type(outcome).__name__)
        return render_response(outcome, window, call=call)

    except Exception as exc:
        log.error("Handler error: %s", exc, exc_info=True)
        return BookingResponse(
            is_free=False,
            event_id=None,
            message=GENERIC_ERROR_MESSAGE,
            error=str(exc),
        )
