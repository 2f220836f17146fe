"""Utility modules for metricview."""

from metricview.utils.file import atomic_write_json, atomic_write_text, datasync
from metricview.utils.timestamp import filename_timestamp, to_utc

__all__ = [
    "atomic_write_json",
    "atomic_write_text",
    "datasync",
    "filename_timestamp",
    "to_utc",
]
