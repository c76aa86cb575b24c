"""Duration resolution: integer or free text -> minutes."""

from __future__ import annotations

import re
from typing import Any

DEFAULT_DURATION_MINUTES = 30

_HOURS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:h|hr|hrs|hour|hours)\b", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(\d+)\s*(?:m|min|mins|minute|minutes)\b", re.IGNORECASE)
_INT_RE = re.compile(r"-?\d+")


def resolve_duration(raw: Any, default: int = DEFAULT_DURATION_MINUTES) -> int:
    """Read a duration in minutes.

    Numbers are taken as given, including zero and negatives; the window
    builder decides whether they are usable.  Text such as "45 minutes",
    "1 hour" or "1 hour 30 minutes" is summed by unit, otherwise the first
    integer wins.  Absent or digit-free input gives ``default``.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, (int, float)):
        return int(raw)

    text = str(raw).strip()
    if not text:
        return default

    hours = _HOURS_RE.findall(text)
    minutes = _MINUTES_RE.findall(text)
    if hours or minutes:
        total = sum(float(h) * 60 for h in hours) + sum(int(m) for m in minutes)
        return int(round(total))

    match = _INT_RE.search(text)
    return int(match.group()) if match else default
