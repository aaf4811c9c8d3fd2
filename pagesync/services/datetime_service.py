"""Timestamps as stored in the database and as returned by the API."""

from __future__ import annotations

from datetime import datetime, timezone

import pendulum

# Stored format: YYYY-MM-DD HH:MM:SS.ffffff+HHMM
STORED_FORMAT = "%Y-%m-%d %H:%M:%S.%f%z"


def now_utc() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def format_stored(dt: datetime) -> str:
    """Format a datetime for a text timestamp column. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.strftime(STORED_FORMAT)


def stored_now() -> str:
    return format_stored(now_utc())


def parse_stored(value: str) -> datetime:
    """Parse a stored timestamp (or any lax ISO-8601 variant) into an aware datetime."""
    parsed = pendulum.parse(value.strip(), tz="UTC", strict=False)
    if not isinstance(parsed, pendulum.DateTime):
        # Date-only input
        parsed = pendulum.datetime(
            parsed.year, parsed.month, parsed.day, tz="UTC"  # type: ignore[union-attr]
        )
    return parsed  # type: ignore[return-value]


def to_iso(value: str | None) -> str | None:
    """Convert a stored timestamp to ISO 8601 for JSON responses."""
    if value is None:
        return None
    return parse_stored(value).isoformat()
