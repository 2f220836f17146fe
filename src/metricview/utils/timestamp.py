"""Timestamp formatting utilities."""

from __future__ import annotations

from datetime import datetime, timezone


def to_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC; naive datetimes are assumed to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def filename_timestamp(value: datetime | None = None) -> str:
    """Format a timestamp for use inside a file name.

    The result is ISO 8601 in UTC with sub-second precision and the offset
    dropped, and with ``:`` replaced by ``-`` so it is filesystem-safe.

    Args:
        value: Timestamp to format (default: now)

    Examples:
        >>> filename_timestamp(datetime(2024, 1, 15, 12, 30, 45, 123456, tzinfo=timezone.utc))
        '2024-01-15T12-30-45'
    """
    moment = to_utc(value if value is not None else datetime.now(timezone.utc))
    return moment.replace(tzinfo=None).isoformat(timespec="seconds").replace(":", "-")
