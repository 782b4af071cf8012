from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_dt(dt: datetime) -> datetime:
    """Ensure datetime is tz-aware. Raises if naive."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp string into a tz-aware UTC datetime.

    The movies API emits JavaScript ISO strings such as
    ``2024-03-01T10:15:00.000Z``; offsets like ``+09:00`` are accepted too.
    """
    if not isinstance(value, str) or not value:
        raise ValueError("RFC3339 value must be a non-empty string")

    s = value.strip()
    # fromisoformat() on older interpreters rejects the 'Z' suffix.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = normalize_dt(datetime.fromisoformat(s))
    return dt.astimezone(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """Convert a tz-aware datetime to RFC3339 (UTC, millisecond precision, 'Z')."""
    dt = normalize_dt(dt).astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_optional_timestamp(value: Any) -> Optional[datetime]:
    """Parse a wire timestamp, returning None for missing or malformed values."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return parse_rfc3339(value)
    except ValueError:
        return None
