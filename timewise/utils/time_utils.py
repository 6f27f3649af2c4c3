import re
from typing import Collection, Optional

from .config import AFTERNOON_HOURS

_MERIDIEM_RE = re.compile(r'\s*([ap])\.?\s*m\.?$', re.IGNORECASE)
_CLOCK_RE = re.compile(r'^(\d{1,2})(?::(\d{2}))?(?::\d{2})?$')
_COMPACT_RE = re.compile(r'^(\d{1,2})(\d{2})$')
_HHMM_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def normalize_time(raw, afternoon_hours: Optional[Collection[int]] = None) -> str:
    """
    Best-effort conversion of a timetable time string to zero-padded 24h "HH:MM".

    "." is accepted as a separator ("9.50"), compact forms ("0950") and a bare
    hour ("9") are accepted too. Without an AM/PM marker, an hour inside
    `afternoon_hours` (default: config.AFTERNOON_HOURS, i.e. 1-5) is read as
    PM ("2:30" -> "14:30"). Pass an empty collection to turn this off.

    Raises:
        ValueError: the string cannot be read as a time of day.
    """
    if afternoon_hours is None:
        afternoon_hours = AFTERNOON_HOURS

    text = str(raw).strip() if raw is not None else ""
    if not text:
        raise ValueError("Empty time value")

    meridiem = None
    marker = _MERIDIEM_RE.search(text)
    if marker:
        meridiem = marker.group(1).lower()
        text = text[:marker.start()].strip()

    text = text.replace(".", ":").replace(" ", "")

    match = _CLOCK_RE.match(text) or _COMPACT_RE.match(text)
    if not match:
        raise ValueError(f"Unrecognized time value: {raw!r}")

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if minute > 59:
        raise ValueError(f"Minute out of range in {raw!r}")

    if meridiem:
        if not 1 <= hour <= 12:
            raise ValueError(f"Hour out of range for 12-hour time {raw!r}")
        if meridiem == "p" and hour != 12:
            hour += 12
        elif meridiem == "a" and hour == 12:
            hour = 0
    elif hour in afternoon_hours:
        hour += 12

    if hour > 23:
        raise ValueError(f"Hour out of range in {raw!r}")

    return f"{hour:02d}:{minute:02d}"


def is_valid_hhmm(value) -> bool:
    """True for an already-normalized "HH:MM" string."""
    return isinstance(value, str) and bool(_HHMM_RE.match(value))
