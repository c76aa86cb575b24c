"""Value types produced by the resolvers and the window builder."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional


def _utc(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class CallContext:
    """Anchor instant for one request, already projected into the business timezone."""

    instant: datetime
    timezone: str


class DateSource(str, Enum):
    EXPLICIT_ISO = "explicit-iso"
    NATURAL_LANGUAGE = "natural-language"
    PATTERN_FALLBACK = "pattern-fallback"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class DateResolution:
    """A calendar date plus how it was obtained.

    ``source`` governs the past-window correction: only inferred dates
    are moved forward.
    """

    date: Optional[date]
    source: DateSource

    @classmethod
    def unresolved(cls) -> "DateResolution":
        return cls(date=None, source=DateSource.UNRESOLVED)

    @property
    def is_resolved(self) -> bool:
        return self.date is not None and self.source is not DateSource.UNRESOLVED


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise ValueError(f"Invalid time of day {self.hour}:{self.minute}")

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class AppointmentWindow:
    start: datetime
    end: datetime
    timezone: str

    # Same-zone aware datetimes compare by wall clock, which is wrong across
    # a DST change, so every comparison here goes through UTC.
    def __post_init__(self) -> None:
        if _utc(self.end) <= _utc(self.start):
            raise ValueError("Appointment window must end after it starts")

    @property
    def duration_minutes(self) -> int:
        return int((_utc(self.end) - _utc(self.start)).total_seconds() // 60)

    def is_past(self, context: CallContext) -> bool:
        return _utc(self.start) < _utc(context.instant)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """True when ``[start, end)`` intersects this window's ``[start, end)``."""
        return _utc(start) < _utc(self.end) and _utc(end) > _utc(self.start)


@dataclass(frozen=True)
class Contact:
    """Caller details, used for display and the attendee invite only."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
