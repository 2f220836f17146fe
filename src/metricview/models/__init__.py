"""
metricview data models package.

This package contains the data models shared by ingestion, session and export.
"""

from metricview.models.record import EMPTY_COLLECTION, DataPoint, Experiment, ExperimentCollection
from metricview.models.series import MetricSeries
from metricview.models.snapshot import SessionSnapshot
from metricview.models.status import IngestOutcome, IngestResult, UploadStatus

__all__ = [
    "DataPoint",
    "EMPTY_COLLECTION",
    "Experiment",
    "ExperimentCollection",
    "IngestOutcome",
    "IngestResult",
    "MetricSeries",
    "SessionSnapshot",
    "UploadStatus",
]
