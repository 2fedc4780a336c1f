"""Timestamp formatting shared by notes, paths and reports.

Every timestamp is interpreted in UTC so that folder buckets, date
prefixes and display lines agree for the whole run.
"""

import time
from datetime import UTC, datetime
from typing import Literal

TimestampStyle = Literal["date", "time", "prefix"]

_FORMATS: dict[str, str] = {
    "date": "%Y-%m-%d",
    "time": "%H:%M:%S",
    "prefix": "%Y%m%d",
}


def to_datetime(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=UTC)


def format_timestamp(ts: float, style: TimestampStyle) -> str:
    """Format epoch seconds as a date, a time, or a compact date prefix."""
    return to_datetime(ts).strftime(_FORMATS[style])


def format_display(ts: float) -> str:
    """Human-readable form used in note headers: ``2023-11-14 at 22:13:20``."""
    return f"{format_timestamp(ts, 'date')} at {format_timestamp(ts, 'time')}"


def format_report_stamp(ts: float) -> str:
    """Compact form used in report tables: ``2023-11-14 22:13:20``."""
    return f"{format_timestamp(ts, 'date')} {format_timestamp(ts, 'time')}"


def parse_iso(ts: str | None) -> float | None:
    """Parse an ISO 8601 timestamp to epoch seconds, None on failure."""
    if not ts:
        return None
    try:
        dt = datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.timestamp()


def now() -> float:
    return time.time()
