"""Time utilities for timezone-aware UTC datetimes."""

from datetime import UTC, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from backend.app.core.settings import get_settings


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a datetime to aware UTC; naive values are read as UTC.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns, so every comparison against stored instants goes through here.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def get_local_timezone(name: str | None = None) -> tzinfo:
    tz_name = name or get_settings().local_timezone
    if tz_name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(tz_name)
