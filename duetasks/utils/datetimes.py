"""Naive local date-time helpers.

Due values are stored as ``YYYY-MM-DDTHH:mm`` strings with no timezone and are
interpreted as local wall-clock time. Parsing is soft: malformed input yields
``None`` and callers exclude such tasks from time-based checks instead of
failing the whole computation. Day arithmetic works on calendar fields, never
on elapsed seconds, so it is unaffected by DST transitions.
"""
from __future__ import annotations

import math
import re
from datetime import datetime, time, timedelta
from typing import Optional

from duetasks.core.exceptions import UnparseableDateTimeError

DUE_AT_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$")
MINUTES_PER_DAY = 24 * 60


def pad2(n: int) -> str:
    return f"{n:02d}"


def is_valid_due_at(value: str) -> bool:
    """Return True when value matches the stored YYYY-MM-DDTHH:mm pattern."""
    return isinstance(value, str) and DUE_AT_PATTERN.match(value) is not None


def _split_ints(value: str, sep: str, count: int) -> Optional[list]:
    parts = value.split(sep)
    if len(parts) < count:
        return None
    try:
        return [int(p) for p in parts[:count]]
    except ValueError:
        return None


def parse_local_date_only(value: Optional[str]) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` into local midnight, or None."""
    if not value:
        return None
    fields = _split_ints(value, "-", 3)
    if fields is None:
        return None
    y, m, d = fields
    try:
        return datetime(y, m, d)
    except ValueError:
        return None


def parse_local_time_to_minutes(value: Optional[str]) -> Optional[int]:
    """Parse ``HH:mm`` into minutes since midnight, or None."""
    if not value:
        return None
    fields = _split_ints(value, ":", 2)
    if fields is None:
        return None
    hh, mm = fields
    if not (0 <= hh < 24 and 0 <= mm < 60):
        return None
    return hh * 60 + mm


def parse_local_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse ``YYYY-MM-DDTHH:mm`` into a naive local datetime.

    Returns None for anything unparseable; never raises.
    """
    if not isinstance(value, str) or "T" not in value:
        return None
    date_part, time_part = value.split("T", 1)
    day = parse_local_date_only(date_part)
    minutes = parse_local_time_to_minutes(time_part)
    if day is None or minutes is None:
        return None
    return day.replace(hour=minutes // 60, minute=minutes % 60)


def require_local_datetime(value: Optional[str]) -> datetime:
    """Strict variant of parse_local_datetime for validation paths."""
    if not is_valid_due_at(value):
        raise UnparseableDateTimeError(value)
    parsed = parse_local_datetime(value)
    if parsed is None:
        raise UnparseableDateTimeError(value)
    return parsed


def get_date_part(due_at: str) -> str:
    return due_at.split("T", 1)[0]


def get_time_part(due_at: str) -> str:
    parts = due_at.split("T", 1)
    return parts[1] if len(parts) > 1 else ""


def local_date_key(moment: datetime) -> str:
    return f"{moment.year}-{pad2(moment.month)}-{pad2(moment.day)}"


def to_due_at(moment: datetime) -> str:
    """Encode a datetime back into the stored minute-granularity format."""
    return f"{local_date_key(moment)}T{pad2(moment.hour)}:{pad2(moment.minute)}"


def add_days(moment: datetime, days: int) -> datetime:
    """Shift by whole calendar days keeping the wall-clock time."""
    shifted = moment.date() + timedelta(days=days)
    return datetime.combine(shifted, moment.time())


def start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time(0, 0, 0, 0))


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time(23, 59, 59, 999000))


def minutes_until(target: datetime, now: datetime) -> int:
    """Whole minutes from now until target, rounded up."""
    return math.ceil((target - now).total_seconds() / 60)


def format_local_datetime(value: str) -> str:
    """Display form of a stored due value; unparseable input is returned as-is."""
    parsed = parse_local_datetime(value)
    if parsed is None:
        return value
    return parsed.strftime("%b %d, %Y, %H:%M")


def format_datetime(moment: datetime) -> str:
    return moment.strftime("%b %d, %H:%M")


def now_local() -> datetime:
    """Read the wall clock once, as naive local time truncated to seconds."""
    return datetime.now().replace(microsecond=0)


