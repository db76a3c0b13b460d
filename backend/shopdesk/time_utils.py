# Overview: Timestamp helpers. Everything is stored and compared as naive UTC.

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    """Current time as naive UTC (the form stored in every collection)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read an ISO-8601 date or datetime from a request or a stored record.

    Blank input gives None. A bare date ("2024-01-10") is midnight UTC, naive
    values are taken as UTC, and offsets ("Z", "-03:00") are converted.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return _as_naive_utc(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """JSON form: second precision with a trailing 'Z' ("2024-01-10T09:00:00Z")."""
    if dt is None:
        return None
    return _as_naive_utc(dt).replace(microsecond=0).isoformat() + "Z"


def day_key(value: Union[datetime, date]) -> str:
    """Calendar day used to bucket sales ("2024-03-01")."""
    return value.strftime("%Y-%m-%d")


def day_label(key: str) -> str:
    """Short chart label for a day key ("2024-03-01" -> "03/01")."""
    _, month, day = key.split("-")
    return f"{month}/{day}"
