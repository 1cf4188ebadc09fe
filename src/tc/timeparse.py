"""Time, duration and date helpers for CLI flags."""

from __future__ import annotations

import re
from datetime import date, datetime

from tc.errors import InputFormatError

_TIME_HH_MM = re.compile(r"[0-9]{2}:[0-9]{2}")
_TIME_HH_MM_SS = re.compile(r"[0-9]{2}:[0-9]{2}:[0-9]{2}")
_SECONDS = re.compile(r"[0-9]+")
_DURATION = re.compile(r"([0-9]+)([hms])", re.IGNORECASE)

_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def normalize_time(value: str | None) -> str | None:
    """Normalize a time of day to HH:MM:SS.

    Args:
        value: Time as HH:MM or HH:MM:SS.

    Returns:
        The time as HH:MM:SS, or None if no value was given.

    Raises:
        InputFormatError: If the value has any other shape.
    """
    if not value:
        return None
    if _TIME_HH_MM_SS.fullmatch(value):
        return value
    if _TIME_HH_MM.fullmatch(value):
        return f"{value}:00"
    raise InputFormatError(f"Invalid time format: {value}. Use HH:MM or HH:MM:SS.")


def parse_duration_seconds(value: str | int | None) -> int | None:
    """Parse a duration given as seconds or as 1h/30m/45s.

    Returns None when no value was given so callers can tell "not provided"
    apart from a zero duration.

    Raises:
        InputFormatError: If the value is not a valid duration (including "").
    """
    if value is None:
        return None
    raw = str(value).strip()
    if _SECONDS.fullmatch(raw):
        return int(raw)
    match = _DURATION.fullmatch(raw)
    if not match:
        raise InputFormatError(f"Invalid duration: {value}. Use seconds or 1h/30m/45s format.")
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit.lower()]


def compute_duration_seconds(day: str, start_time: str, end_time: str) -> int:
    """Compute whole seconds between two times on the same local day.

    Args:
        day: Date as YYYY-MM-DD.
        start_time: Start as HH:MM:SS.
        end_time: End as HH:MM:SS.

    Returns:
        Seconds from start to end, rounded down.

    Raises:
        InputFormatError: If either timestamp is invalid or end is before start.
    """
    try:
        start = datetime.strptime(f"{day}T{start_time}", "%Y-%m-%dT%H:%M:%S")
        end = datetime.strptime(f"{day}T{end_time}", "%Y-%m-%dT%H:%M:%S")
    except (TypeError, ValueError) as e:
        raise InputFormatError("Unable to parse start/end time for duration.") from e

    # Naive datetimes are local time; timestamp() applies the local UTC offset
    diff = end.timestamp() - start.timestamp()
    if diff < 0:
        raise InputFormatError("End time must be after start time.")
    return int(diff)


def format_date(value: date | None = None) -> str:
    """Format a date as YYYY-MM-DD (default: today, local time)."""
    if value is None:
        value = date.today()
    return value.strftime("%Y-%m-%d")


def format_datetime(value: datetime | None = None) -> str:
    """Format a datetime as local YYYY-MM-DD HH:MM:SS (default: now)."""
    if value is None:
        value = datetime.now()
    elif value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%Y-%m-%d %H:%M:%S")
