"""
metricview exceptions module.

Ingestion errors are raised inside the pipeline and converted into a
structured result at its boundary; callers of ``parse_csv`` never see them.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base class for errors that abort a CSV ingestion."""

    pass


class SourceReadError(IngestError):
    """Exception raised when the CSV source cannot be read."""

    pass


class MissingColumnsError(IngestError):
    """Exception raised when the header lacks required columns."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")


class EmptyDataError(IngestError):
    """Exception raised when the CSV has a header but no data rows."""

    def __init__(self) -> None:
        super().__init__("CSV file is empty or contains no valid data")


class RowValidationError(IngestError, ValueError):
    """Exception raised when a single row fails validation.

    The message always starts with ``Row <index>:`` and names the offending field.
    """

    def __init__(self, row_index: int, field: str, reason: str) -> None:
        self.row_index = row_index
        self.field = field
        super().__init__(f"Row {row_index}: {field} {reason}")
