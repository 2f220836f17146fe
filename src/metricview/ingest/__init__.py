"""CSV ingestion: row validation and the ingestion pipeline."""

from .pipeline import CsvSource, build_experiments, parse_csv, parse_csv_sync, read_frame
from .validator import REQUIRED_COLUMNS, validate_row

__all__ = [
    "CsvSource",
    "REQUIRED_COLUMNS",
    "build_experiments",
    "parse_csv",
    "parse_csv_sync",
    "read_frame",
    "validate_row",
]
