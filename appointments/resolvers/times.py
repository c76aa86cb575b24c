"""Time resolution: raw caller phrase -> TimeOfDay.

Three deterministic patterns only; free-text time parsing is deliberately
not attempted.  Anything else, including an absent phrase, is unresolved.
"""

from __future__ import annotations

import re
from typing import Optional

from appointments.models.appointment import TimeOfDay

_HH_MM_RE = re.compile(r"^(\d{1,2})[:.](\d{2})$")
_AM_PM_RE = re.compile(r"^(\d{1,2})(?:[:.]?(\d{2}))?\s*([ap])\.?\s*m\.?$", re.IGNORECASE)
_BARE_HOUR_RE = re.compile(r"^(\d{1,2})$")


def _twenty_four_hour(phrase: str) -> Optional[TimeOfDay]:
    match = _HH_MM_RE.match(phrase)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return TimeOfDay(hour, minute)


def _am_pm(phrase: str) -> Optional[TimeOfDay]:
    match = _AM_PM_RE.match(phrase)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if not 1 <= hour <= 12 or minute > 59:
        return None
    if match.group(3).lower() == "a":
        hour = 0 if hour == 12 else hour
    elif hour != 12:
        hour += 12
    return TimeOfDay(hour, minute)


def _bare_hour(phrase: str) -> Optional[TimeOfDay]:
    match = _BARE_HOUR_RE.match(phrase)
    if not match:
        return None
    hour = int(match.group(1))
    return TimeOfDay(hour, 0) if hour <= 23 else None


def resolve_time(phrase: Optional[str]) -> Optional[TimeOfDay]:
    """Return the requested time of day, or None when it cannot be read."""
    if phrase is None:
        return None
    text = str(phrase).strip()
    if not text:
        return None
    return _twenty_four_hour(text) or _am_pm(text) or _bare_hour(text)
