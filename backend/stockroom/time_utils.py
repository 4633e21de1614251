from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return utcnow().date()


def parse_calendar_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a client-supplied date into a calendar date.

    - None / "" -> None
    - "YYYY-MM-DD", "YYYY-MM-DD HH:MM:SS" and full ISO-8601 strings are accepted
    - a trailing "Z" or offset is allowed; the date as written is kept
      (no conversion to UTC, a delivery on the 5th stays on the 5th)

    Raises ValueError when the string cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    return datetime.fromisoformat(s).date()


def format_date(value: Optional[Union[date, datetime]]) -> Optional[str]:
    """Wire format for calendar dates: YYYY-MM-DD, time-of-day discarded."""
    if value is None:
        return None
    return value.strftime(DATE_FORMAT)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Wire format for audit timestamps: YYYY-MM-DD HH:MM:SS."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(TIMESTAMP_FORMAT)
