"""Call context resolution: the anchor "now" for a single request."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil.parser import isoparse

from appointments.models.appointment import CallContext

log = logging.getLogger("appointments.resolvers.context")

_EPOCH_RE = re.compile(r"^\d+(\.\d+)?$")
_EPOCH_MS_THRESHOLD = 10**12


def parse_instant(raw: Optional[str], tz: ZoneInfo) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp or a Unix epoch (seconds or millis).

    Naive ISO values are read as wall time in ``tz``.  Returns None when
    the value cannot be read as an instant.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None

    if _EPOCH_RE.match(text):
        value = float(text)
        if value >= _EPOCH_MS_THRESHOLD:
            value /= 1000.0
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    try:
        parsed = isoparse(text)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def resolve_call_context(
    header_timestamp: Optional[str],
    body_timestamp: Optional[str],
    tz: ZoneInfo,
    now: Optional[datetime] = None,
) -> CallContext:
    """Pick the request's anchor instant.

    Header beats body beats wall clock; whichever value is chosen, an
    unparseable one falls back to the wall clock.  Never raises.
    """
    wall_clock = now or datetime.now(tz=timezone.utc)

    raw = header_timestamp if header_timestamp else body_timestamp
    instant = parse_instant(raw, tz) if raw else None
    if raw and instant is None:
        log.warning("Unparseable call timestamp %r, using wall clock", raw)

    instant = (instant or wall_clock).astimezone(tz)
    return CallContext(instant=instant, timezone=str(tz))
