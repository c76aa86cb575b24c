"""Data models for the booking pipeline."""

from .appointment import (
    AppointmentWindow,
    CallContext,
    Contact,
    DateResolution,
    DateSource,
    TimeOfDay,
)
from .booking import BookingRequest, BookingResponse

__all__ = [
    "AppointmentWindow",
    "BookingRequest",
    "BookingResponse",
    "CallContext",
    "Contact",
    "DateResolution",
    "DateSource",
    "TimeOfDay",
]
