"""
Ingestion result and status models.

``IngestResult`` is what the CSV pipeline returns, ``IngestOutcome`` is the
summary the session hands back to its caller, and ``UploadStatus`` is the
observable record of the last ingestion.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from metricview.models.record import Experiment


class IngestResult(BaseModel):
    """Structured result of parsing one CSV source.

    On failure ``experiments`` is always empty; no partial collection is kept.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    experiments: dict[str, Experiment] = Field(default_factory=dict)
    error: str | None = None
    total_rows: int | None = None

    @classmethod
    def failure(cls, message: str) -> IngestResult:
        return cls(success=False, error=message)


class IngestOutcome(BaseModel):
    """Summary of an ingestion returned by ``ExperimentSession.ingest``."""

    success: bool
    experiments_count: int | None = None
    total_rows: int | None = None
    error: str | None = None


class UploadStatus(BaseModel):
    """Observable status of the most recent ingestion."""

    loading: bool = False
    error: str | None = None
    success: bool = False
