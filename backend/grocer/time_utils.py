from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union


DateLike = Union[date, datetime]


def now() -> datetime:
    """Register 'now' in local wall-clock time (naive, canonical)."""
    return datetime.now()


def today() -> date:
    return date.today()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string into a local-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DDTHH:MM[:SS[.ffffff]]" (naive) is kept as-is (local time)
    - "...Z" or "...+/-HH:MM" is converted to local time and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    if dt.tzinfo is None:
        return dt

    return dt.astimezone().replace(tzinfo=None)


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse "YYYY-MM-DD" (or a full ISO datetime) into a date."""
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    if len(s) == 10:
        return date.fromisoformat(s)
    dt = parse_iso_datetime(s)
    return dt.date() if dt else None


def as_date(value: DateLike) -> date:
    """Drop the time-of-day part; report ranges compare calendar dates only."""
    if isinstance(value, datetime):
        return value.date()
    return value


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a local-naive datetime without an offset, as stored on disk."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).astimezone().replace(tzinfo=None)
    return dt.isoformat()
