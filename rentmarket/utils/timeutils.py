"""Date/time parsing helpers for booking start and return times."""
from datetime import datetime, timedelta, timezone

import pytz

from rentmarket.exceptions import ValidationError


def utcnow() -> datetime:
    """Wrapper for easier testing/mocking."""
    return datetime.now(timezone.utc)


def parse_start_time(value, tz_name: str = "UTC") -> datetime:
    """
    Parse a client-supplied start time into an aware UTC datetime.
    Supports:
      - 'YYYY-MM-DDTHH:MM[:SS]' and the same with a space instead of 'T'
      - Above with 'Z' or timezone offsets like '+05:00'
      - datetime objects
    Naive values are read as local time in tz_name.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        s = str(value or "").strip()
        if not s:
            raise ValidationError("Start time is required")
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s.replace(" ", "T", 1))
        except ValueError:
            raise ValidationError(f"Invalid start time: {value!r}")

    if dt.tzinfo is None:
        try:
            local = pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            local = pytz.utc
        dt = local.localize(dt)
    return dt.astimezone(pytz.utc)


def return_time(start: datetime, duration_hours: float) -> datetime:
    return start + timedelta(hours=duration_hours)


def to_iso(dt: datetime) -> str:
    return dt.astimezone(pytz.utc).isoformat(timespec="seconds")
