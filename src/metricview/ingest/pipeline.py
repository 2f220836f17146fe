"""
CSV ingestion pipeline.

Reads a delimited-text source with polars, validates every row in input
order and groups the resulting data points into per-experiment series.
The pipeline is fail-fast and atomic: the first invalid row aborts the whole
ingestion and no partial collection is returned.

Every failure is reported through ``IngestResult.error``; nothing raised
inside the pipeline escapes ``parse_csv`` or ``parse_csv_sync``.
"""

from __future__ import annotations

import asyncio
import io
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import IO, Any, Union

import polars as pl

from metricview.config import get_resource_limits
from metricview.exceptions import EmptyDataError, IngestError, MissingColumnsError, SourceReadError
from metricview.logger import logger
from metricview.models import DataPoint, Experiment, IngestResult

from .validator import REQUIRED_COLUMNS, validate_row

__all__ = [
    "CsvSource",
    "build_experiments",
    "parse_csv",
    "parse_csv_sync",
    "read_frame",
]

CsvSource = Union[str, os.PathLike, bytes, bytearray, IO[bytes], IO[str]]


def _describe(source: CsvSource) -> str:
    if isinstance(source, (str, os.PathLike)):
        return str(source)
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return getattr(source, "name", None) or f"<{type(source).__name__}>"


def _read_source(source: CsvSource, max_file_size: int) -> bytes:
    """Read the whole source into memory.

    Raises:
        SourceReadError: If the source cannot be read or exceeds max_file_size
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
        elif isinstance(source, (str, os.PathLike)):
            path = Path(source)
            size = path.stat().st_size
            if size > max_file_size:
                raise SourceReadError(f"Failed to read CSV file: file size {size} bytes exceeds limit of {max_file_size} bytes")
            data = path.read_bytes()
        elif hasattr(source, "read"):
            content = source.read()
            data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        else:
            raise SourceReadError(f"Failed to read CSV file: unsupported source type {type(source).__name__}")
    except OSError as e:
        raise SourceReadError(f"Failed to read CSV file: {e}") from e

    if len(data) > max_file_size:
        raise SourceReadError(f"Failed to read CSV file: file size {len(data)} bytes exceeds limit of {max_file_size} bytes")
    return data


def read_frame(data: bytes) -> pl.DataFrame:
    """Parse CSV bytes into a string-typed DataFrame.

    Header names and cell values are stripped of surrounding whitespace.
    When a trimmed header name repeats, the first column wins. Empty lines
    are skipped by the reader; a line of empty cells such as ``,,,`` is kept
    and reaches validation as a row.

    Args:
        data: Raw CSV content (UTF-8)

    Returns:
        Polars DataFrame with one String column per distinct header name.
        A source without a header line yields a DataFrame with no columns.
    """
    df = pl.read_csv(
        io.BytesIO(data),
        has_header=True,
        infer_schema=False,
        truncate_ragged_lines=True,
        raise_if_empty=False,
        encoding="utf8",
    )

    columns: list[pl.Expr] = []
    seen: set[str] = set()
    for name in df.columns:
        trimmed = name.strip()
        if trimmed in seen:
            continue
        seen.add(trimmed)
        columns.append(pl.col(name).str.strip_chars().alias(trimmed))

    if not columns:
        return pl.DataFrame()

    return df.select(columns)


def _check_columns(columns: Iterable[str]) -> None:
    present = set(columns)
    missing = [column for column in REQUIRED_COLUMNS if column not in present]
    if missing:
        raise MissingColumnsError(missing)


def build_experiments(rows: Iterable[Mapping[str, Any]]) -> dict[str, Experiment]:
    """Validate rows in order and group them into experiments.

    Args:
        rows: Raw records in input order

    Returns:
        Mapping of experiment id to Experiment, each sorted by step

    Raises:
        RowValidationError: On the first invalid row; later rows are not read
    """
    grouped: dict[str, list[DataPoint]] = {}
    for index, row in enumerate(rows, start=1):
        point = validate_row(row, index)
        grouped.setdefault(point.experiment_id, []).append(point)

    return {experiment_id: Experiment.from_points(experiment_id, points) for experiment_id, points in grouped.items()}


def _ingest(data: bytes, max_rows: int) -> IngestResult:
    df = read_frame(data)
    _check_columns(df.columns)

    if df.height == 0:
        raise EmptyDataError()
    if df.height > max_rows:
        raise IngestError(f"CSV file has too many rows: {df.height} (max: {max_rows})")

    experiments = build_experiments(df.select(REQUIRED_COLUMNS).iter_rows(named=True))
    total_rows = sum(len(experiment.data) for experiment in experiments.values())
    return IngestResult(success=True, experiments=experiments, total_rows=total_rows)


def parse_csv_sync(source: CsvSource) -> IngestResult:
    """Ingest a CSV source synchronously.

    Args:
        source: File path, raw bytes, or an open binary/text file object

    Returns:
        IngestResult: ``success=True`` with the experiment collection and
        ``total_rows``, or ``success=False`` with a single error message.
    """
    label = _describe(source)
    try:
        limits = get_resource_limits()
    except ValueError as e:
        logger.error(f"Invalid resource limits configuration: {e}")
        return IngestResult.failure(f"Invalid resource limits configuration: {e}")

    try:
        data = _read_source(source, limits.max_file_size)
        result = _ingest(data, limits.max_rows)
    except IngestError as e:
        logger.warning(f"Rejected CSV {label}: {e}")
        return IngestResult.failure(str(e))
    except pl.exceptions.PolarsError as e:
        logger.warning(f"Could not parse CSV {label}: {e}")
        return IngestResult.failure(f"Failed to parse CSV: {e}")
    except Exception as e:
        logger.exception(f"Unexpected error while ingesting CSV {label}")
        return IngestResult.failure(f"Failed to parse CSV: {e}")

    logger.info(f"Loaded {result.total_rows} data points across {len(result.experiments)} experiments from {label}")
    return result


async def parse_csv(source: CsvSource) -> IngestResult:
    """Ingest a CSV source without blocking the event loop.

    The source is read and parsed in a worker thread and the call resolves
    to one structured result; callers never observe partial progress.
    """
    return await asyncio.to_thread(parse_csv_sync, source)
