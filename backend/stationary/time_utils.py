from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    """Local calendar date used for issue and signature dates."""
    return date.today()


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a calendar date as stored on issue records.

    - None / "" -> None
    - "YYYY-MM-DD" -> date
    - a full ISO-8601 timestamp is accepted and truncated to its date
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None

    if len(s) > 10 and s[10] in "T ":
        s = s[:10]

    return date.fromisoformat(s)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
