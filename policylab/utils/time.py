from __future__ import annotations
from typing import Optional
from datetime import datetime
import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def iso_utc(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z (2024-01-31T12:00:00.000Z)."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    dt = dt.astimezone(pytz.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    return iso_utc(utc_now())


def parse_iso(s: str) -> Optional[datetime]:
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def to_timezone(dt: datetime, tz: str) -> datetime:
    tzinfo = pytz.timezone(tz)
    if dt.tzinfo is None:
        return tzinfo.localize(dt)
    return dt.astimezone(tzinfo)
