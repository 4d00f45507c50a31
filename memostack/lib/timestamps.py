"""
Timestamp helpers.

All timestamps are timezone-aware UTC datetimes, persisted as ISO-8601
strings with microsecond precision so they round-trip exactly.
"""

from datetime import datetime, timezone

LOCAL_FORMAT = "%Y-%m-%d %H:%M"


def utc_now() -> datetime:
    """Current wall-clock time in UTC."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Serialize a datetime for storage."""
    return as_utc(value).isoformat(timespec="microseconds")


def format_local(value: datetime | None) -> str:
    """Minute-precision local time for display, '' for None."""
    return value.astimezone().strftime(LOCAL_FORMAT) if value else ""


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse a stored timestamp.

    Returns None for missing or unparseable values. Naive values are
    treated as UTC.
    """
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    return as_utc(parsed)
