"""Tagged results for the calendar calls and the terminal booking outcome.

Availability check:  Free | Busy | CheckFailed
Event creation:      Created | CreationFailed
Pipeline outcome:    Booked | AwaitingConfirmation | SlotBusy | ParseFailure
                     | PastWindow | AvailabilityCheckFailed | CreateFailed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from appointments.calendar_providers.base import BusyInterval


# ── Availability check ──────────────────────────────────────────────


@dataclass(frozen=True)
class Free:
    pass


@dataclass(frozen=True)
class Busy:
    intervals: list[BusyInterval] = field(default_factory=list)


@dataclass(frozen=True)
class CheckFailed:
    cause: str


AvailabilityResult = Union[Free, Busy, CheckFailed]


# ── Event creation ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Created:
    event_id: str
    html_link: str = ""


@dataclass(frozen=True)
class CreationFailed:
    cause: str


CreationResult = Union[Created, CreationFailed]


# ── Booking outcome ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Booked:
    event_id: str
    html_link: str = ""


@dataclass(frozen=True)
class AwaitingConfirmation:
    """Slot is free; auto-booking was not requested."""


@dataclass(frozen=True)
class SlotBusy:
    intervals: list[BusyInterval] = field(default_factory=list)


@dataclass(frozen=True)
class ParseFailure:
    need: list[str]

    @property
    def reason(self) -> str:
        return " and ".join(self.need)


@dataclass(frozen=True)
class PastWindow:
    pass


@dataclass(frozen=True)
class AvailabilityCheckFailed:
    cause: str


@dataclass(frozen=True)
class CreateFailed:
    cause: str


BookingOutcome = Union[
    Booked,
    AwaitingConfirmation,
    SlotBusy,
    ParseFailure,
    PastWindow,
    AvailabilityCheckFailed,
    CreateFailed,
]
