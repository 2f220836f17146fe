"""
Export of the current selection back into CSV rows.

The projection is the inverse of ingestion for the selected subset: rows use
the same four columns, in a fixed order, as the ingestion input.
"""

from __future__ import annotations

from collections.abc import Iterable, Set
from datetime import datetime
from pathlib import Path

import polars as pl
from pydantic import BaseModel

from metricview.ingest import REQUIRED_COLUMNS
from metricview.logger import logger
from metricview.models import DataPoint, ExperimentCollection
from metricview.utils import atomic_write_text, filename_timestamp

__all__ = [
    "EXPORT_COLUMNS",
    "ExportArtifact",
    "build_export",
    "export_filename",
    "project_rows",
    "rows_to_csv",
    "write_export",
]

EXPORT_COLUMNS = REQUIRED_COLUMNS

_EXPORT_SCHEMA = {
    "experiment_id": pl.Utf8,
    "metric_name": pl.Utf8,
    "step": pl.Int64,
    "value": pl.Float64,
}


class ExportArtifact(BaseModel):
    """Serialized export ready to be written or downloaded."""

    filename: str
    content: str
    row_count: int


def project_rows(
    experiments: ExperimentCollection,
    selected_experiment_ids: Iterable[str],
    selected_metrics: Set[str],
) -> list[DataPoint]:
    """Flatten the selected experiments back into data point rows.

    Experiments are visited in id order and each keeps its step order. An
    empty ``selected_metrics`` means no metric filter, not an empty export.
    Ids not present in ``experiments`` are skipped.
    """
    rows: list[DataPoint] = []
    for experiment_id in sorted(selected_experiment_ids):
        experiment = experiments.get(experiment_id)
        if experiment is None:
            continue
        if selected_metrics:
            rows.extend(point for point in experiment.data if point.metric_name in selected_metrics)
        else:
            rows.extend(experiment.data)
    return rows


def rows_to_csv(rows: Iterable[DataPoint]) -> str:
    """Serialize rows as CSV with a header and columns in EXPORT_COLUMNS order."""
    df = pl.DataFrame(
        [(row.experiment_id, row.metric_name, row.step, row.value) for row in rows],
        schema=_EXPORT_SCHEMA,
        orient="row",
    )
    return df.select(EXPORT_COLUMNS).write_csv()


def export_filename(now: datetime | None = None) -> str:
    """Return ``experiment_data_<timestamp>.csv`` for the given moment (default: now).

    Examples:
        >>> from datetime import timezone
        >>> export_filename(datetime(2024, 1, 15, 12, 30, 45, tzinfo=timezone.utc))
        'experiment_data_2024-01-15T12-30-45.csv'
    """
    return f"experiment_data_{filename_timestamp(now)}.csv"


def build_export(
    experiments: ExperimentCollection,
    selected_experiment_ids: Iterable[str],
    selected_metrics: Set[str],
    now: datetime | None = None,
) -> ExportArtifact | None:
    """Project and serialize the selection.

    Returns:
        ExportArtifact, or None when the selection yields no rows.
    """
    rows = project_rows(experiments, selected_experiment_ids, selected_metrics)
    if not rows:
        return None
    return ExportArtifact(filename=export_filename(now), content=rows_to_csv(rows), row_count=len(rows))


def write_export(artifact: ExportArtifact, directory: str | Path) -> Path:
    """Write an artifact into ``directory`` under its own file name."""
    path = atomic_write_text(Path(directory) / artifact.filename, artifact.content, suffix=".csv", mode=0o644)
    logger.info(f"Exported {artifact.row_count} rows to {path}")
    return path
