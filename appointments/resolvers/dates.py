"""Date resolution: raw caller phrase -> calendar date with a source tag.

Resolution order, first match wins:

  1. strict ``YYYY-MM-DD``                         -> explicit-iso
  2. spoken forms ("the 1st", "next Friday",
     "a week from today"), then dateparser          -> natural-language
  3. month/day patterns in the call's year,
     rolled one year forward if already past       -> pattern-fallback
  4. nothing matched                               -> unresolved

Steps 2 and 3 never return a day before the call's local date.
An absent phrase is unresolved; there is no default to today.
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional

import dateparser

from appointments.models.appointment import CallContext, DateResolution, DateSource

log = logging.getLogger("appointments.resolvers.dates")

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ORDINAL_RE = re.compile(r"\b(\d{1,2})(st|nd|rd|th)\b")
_FILLER_RE = re.compile(r"\b(the|of|on)\b")
_YEAR_RE = re.compile(r"\b\d{4}\b")
_MONTH_NAME_RE = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\b"
)
_DAY_OF_MONTH_RE = re.compile(r"^(\d{1,2})$")

_WEEKDAYS = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tue": 1, "tues": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thu": 3, "thur": 3, "thurs": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}
_WEEKDAY_RE = re.compile(r"^(?:(next|this|coming|this coming)\s+)?([a-z]+)$")

_COUNTS = {"a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4,
           "five": 5, "six": 6, "seven": 7}
_RELATIVE_DAYS = {"today": 0, "tomorrow": 1, "day after tomorrow": 2}
_OFFSET_RE = re.compile(
    r"^(?:in\s+)?(a|an|one|two|three|four|five|six|seven|\d+)\s+(day|week)s?"
    r"(?:\s+from\s+(today|now|tomorrow))?$"
)

_FALLBACK_FORMATS = (
    "%B %d",  # october 1
    "%b %d",  # oct 1
    "%d %B",  # 1 october
    "%d %b",  # 1 oct
    "%m/%d",  # 10/1
    "%m-%d",  # 10-1
)


def _parse_iso(phrase: str) -> Optional[date]:
    if not _ISO_DATE_RE.match(phrase):
        return None
    try:
        return date.fromisoformat(phrase)
    except ValueError:
        return None


def _normalise(phrase: str) -> str:
    text = phrase.lower().replace(",", " ").replace(".", " ")
    text = _ORDINAL_RE.sub(r"\1", text)
    text = _FILLER_RE.sub(" ", text)
    return " ".join(text.split())


def _next_day_of_month(day: int, today: date) -> Optional[date]:
    """First date on or after ``today`` whose day of month is ``day``."""
    if not 1 <= day <= 31:
        return None
    year, month = today.year, today.month
    for _ in range(13):
        if day <= calendar.monthrange(year, month)[1]:
            candidate = date(year, month, day)
            if candidate >= today:
                return candidate
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return None


def _weekday(text: str, today: date) -> Optional[date]:
    match = _WEEKDAY_RE.match(text)
    if not match or match.group(2) not in _WEEKDAYS:
        return None
    ahead = (_WEEKDAYS[match.group(2)] - today.weekday()) % 7
    # "next Friday" never means today; a bare or "this" weekday can.
    if match.group(1) == "next" and ahead == 0:
        ahead = 7
    return today + timedelta(days=ahead)


def _relative(text: str, today: date) -> Optional[date]:
    if text in _RELATIVE_DAYS:
        return today + timedelta(days=_RELATIVE_DAYS[text])
    match = _OFFSET_RE.match(text)
    if not match or not (text.startswith("in ") or match.group(3)):
        return None
    count = _COUNTS.get(match.group(1))
    if count is None:
        count = int(match.group(1))
    days = count * (7 if match.group(2) == "week" else 1)
    if match.group(3) == "tomorrow":
        days += 1
    return today + timedelta(days=days)


def _parse_spoken(text: str, today: date) -> Optional[date]:
    match = _DAY_OF_MONTH_RE.match(text)
    if match:
        return _next_day_of_month(int(match.group(1)), today)
    return _weekday(text, today) or _relative(text, today)


def _parse_dateparser(text: str, today: date) -> Optional[date]:
    # Midnight base: a month/day naming today is not "past" and stays this year.
    base = datetime.combine(today, datetime.min.time())
    parsed = dateparser.parse(
        text,
        languages=["en"],
        settings={
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": base,
            "RETURN_AS_TIMEZONE_AWARE": False,
        },
    )
    if not parsed:
        return None
    result = parsed.date()

    # dateparser can push a month/day that is still ahead this year into next year.
    if result.year > today.year and _MONTH_NAME_RE.search(text) and not _YEAR_RE.search(text):
        try:
            earlier = result.replace(year=result.year - 1)
        except ValueError:
            earlier = None
        if earlier is not None and earlier >= today:
            result = earlier

    if result < today:
        log.debug("dateparser gave past date %s for %r, ignoring", result, text)
        return None
    return result


def _parse_natural(phrase: str, context: CallContext) -> Optional[date]:
    text = _normalise(phrase)
    if not text:
        return None
    today = context.instant.date()
    return _parse_spoken(text, today) or _parse_dateparser(text, today)


def _parse_pattern(phrase: str, context: CallContext) -> Optional[date]:
    text = _normalise(phrase)
    if not text:
        return None
    today = context.instant.date()
    for fmt in _FALLBACK_FORMATS:
        try:
            parsed = datetime.strptime(f"{text} {today.year}", f"{fmt} %Y").date()
        except ValueError:
            continue
        # The whole day has to be gone before we roll, so "today" stays today.
        if parsed < today:
            try:
                parsed = parsed.replace(year=parsed.year + 1)
            except ValueError:
                return None
        return parsed
    return None


def resolve_date(phrase: Optional[str], context: CallContext) -> DateResolution:
    """Resolve a spoken or typed date relative to the call context."""
    if phrase is None or not str(phrase).strip():
        return DateResolution.unresolved()
    phrase = str(phrase).strip()

    parsed = _parse_iso(phrase)
    if parsed:
        return DateResolution(date=parsed, source=DateSource.EXPLICIT_ISO)

    parsed = _parse_natural(phrase, context)
    if parsed:
        return DateResolution(date=parsed, source=DateSource.NATURAL_LANGUAGE)

    parsed = _parse_pattern(phrase, context)
    if parsed:
        return DateResolution(date=parsed, source=DateSource.PATTERN_FALLBACK)

    log.info("Could not resolve date phrase %r", phrase)
    return DateResolution.unresolved()
