"""Caller-facing rendering: time labels, summaries and message templates."""

from __future__ import annotations

from datetime import datetime

from appointments.models.appointment import AppointmentWindow, CallContext
from appointments.models.booking import AppointmentSummary, CallSummary
from appointments.models.outcomes import (
    AvailabilityCheckFailed,
    AwaitingConfirmation,
    Booked,
    BookingOutcome,
    CreateFailed,
    ParseFailure,
    PastWindow,
    SlotBusy,
)


def redact_pii(value: str | None) -> str:
    """Mask PII for logging — show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


def time_of_day_label(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def format_time12(dt: datetime) -> str:
    """``15:05`` -> ``3:05 pm``."""
    hour = dt.hour % 12 or 12
    suffix = "am" if dt.hour < 12 else "pm"
    return f"{hour}:{dt.minute:02d} {suffix}"


def spoken_date(dt: datetime) -> str:
    """``2025-10-01`` -> ``Wednesday, October 1``."""
    return f"{dt.strftime('%A, %B')} {dt.day}"


def appointment_summary(window: AppointmentWindow) -> AppointmentSummary:
    start = window.start
    return AppointmentSummary(
        date=start.strftime("%Y-%m-%d"),
        time24=start.strftime("%H:%M"),
        time12=format_time12(start),
        local=start.strftime("%Y-%m-%d %H:%M"),
        iso=start.isoformat(),
        time_of_day=time_of_day_label(start.hour),
        duration_minutes=window.duration_minutes,
        timezone=window.timezone,
    )


def call_summary(context: CallContext) -> CallSummary:
    return CallSummary(
        iso=context.instant.isoformat(),
        local=context.instant.strftime("%Y-%m-%d %H:%M"),
        time_of_day=time_of_day_label(context.instant.hour),
        timezone=context.timezone,
    )


GENERIC_ERROR_MESSAGE = "Sorry, I hit an error interpreting that time. Try another time."


def outcome_message(outcome: BookingOutcome, window: AppointmentWindow | None = None) -> str:
    """One fixed template per outcome."""
    when = ""
    if window is not None:
        when = f"{spoken_date(window.start)} at {format_time12(window.start)}"

    if isinstance(outcome, Booked):
        return f"You're all set. I've booked {when}."
    if isinstance(outcome, AwaitingConfirmation):
        return f"{when} is available. Would you like me to book it?"
    if isinstance(outcome, SlotBusy):
        return f"Sorry, {when} is already taken. Is there another time that works?"
    if isinstance(outcome, ParseFailure):
        return f"Sorry, I didn't catch the {outcome.reason}. Could you say that again?"
    if isinstance(outcome, PastWindow):
        return f"{when} has already passed. Could you pick a time in the future?"
    if isinstance(outcome, AvailabilityCheckFailed):
        return "Sorry, I couldn't check the calendar right now. Please try again in a little while."
    if isinstance(outcome, CreateFailed):
        return (
            f"{when} is open, but I wasn't able to book it just now. "
            "Please try again in a moment."
        )
    return GENERIC_ERROR_MESSAGE
