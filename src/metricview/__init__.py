"""
metricview - Load, select and export machine learning experiment metrics.

Examples:
    >>> import asyncio
    >>> from metricview import ExperimentSession
    >>> session = ExperimentSession()
    >>> outcome = asyncio.run(session.ingest("metrics.csv"))
    >>> session.select_all_experiments()
    >>> session.select_all_metrics()
    >>> series = session.chart_series
"""

from metricview.export import build_export, project_rows, rows_to_csv
from metricview.ingest import parse_csv, parse_csv_sync, validate_row
from metricview.models import DataPoint, Experiment, IngestOutcome, IngestResult, MetricSeries, UploadStatus
from metricview.session import ExperimentSession

__version__ = "0.1.0"
__all__ = [
    "DataPoint",
    "Experiment",
    "ExperimentSession",
    "IngestOutcome",
    "IngestResult",
    "MetricSeries",
    "UploadStatus",
    "build_export",
    "parse_csv",
    "parse_csv_sync",
    "project_rows",
    "rows_to_csv",
    "validate_row",
]
