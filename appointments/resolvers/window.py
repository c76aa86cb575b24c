"""Combine the resolved date, time and duration into an appointment window."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

from appointments.models.appointment import (
    AppointmentWindow,
    CallContext,
    DateResolution,
    DateSource,
    TimeOfDay,
)
from appointments.models.outcomes import ParseFailure

log = logging.getLogger("appointments.resolvers.window")


def _compose(day: date, time_of_day: TimeOfDay, duration: int, tz: ZoneInfo) -> AppointmentWindow:
    # Arithmetic in UTC: a wall time skipped by spring-forward lands on the
    # real instant after the gap, and the end is exactly ``duration`` later.
    start_utc = datetime.combine(
        day, time(time_of_day.hour, time_of_day.minute), tzinfo=tz
    ).astimezone(timezone.utc)
    return AppointmentWindow(
        start=start_utc.astimezone(tz),
        end=(start_utc + timedelta(minutes=duration)).astimezone(tz),
        timezone=str(tz),
    )


def build_window(
    date_resolution: DateResolution,
    time_of_day: Optional[TimeOfDay],
    duration: int,
    tz: ZoneInfo,
    context: CallContext,
) -> Union[AppointmentWindow, ParseFailure]:
    """Build the window, or report which inputs could not be understood.

    An inferred date whose window has already started is moved forward
    exactly one day.  Explicit ISO dates are left alone, even in the past.
    """
    need: list[str] = []
    if not date_resolution.is_resolved:
        need.append("date")
    if time_of_day is None:
        need.append("time")
    if need:
        return ParseFailure(need=need)
    if duration <= 0:
        return ParseFailure(need=["duration"])

    window = _compose(date_resolution.date, time_of_day, duration, tz)

    if window.is_past(context) and date_resolution.source is not DateSource.EXPLICIT_ISO:
        rolled = _compose(date_resolution.date + timedelta(days=1), time_of_day, duration, tz)
        log.info(
            "Inferred window %s already past at %s, moved to %s",
            window.start.isoformat(),
            context.instant.isoformat(),
            rolled.start.isoformat(),
        )
        window = rolled

    return window
