"""
ExperimentSession - selection state over an ingested experiment collection.

One session holds one experiment collection, the user's experiment and metric
selections, a metric name filter and the status of the last ingestion. Every
derived view (available metrics, chart series, totals) is a property computed
from the current state on each read, so views can never be stale.

State writes replace whole immutable values (frozensets, read-only mappings)
instead of mutating them, so a reader always sees a fully committed state.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import MappingProxyType

from pydantic import ValidationError

from metricview.export import build_export, write_export
from metricview.ingest import CsvSource, parse_csv
from metricview.logger import logger
from metricview.models import (
    EMPTY_COLLECTION,
    Experiment,
    ExperimentCollection,
    IngestOutcome,
    MetricSeries,
    SessionSnapshot,
    UploadStatus,
)
from metricview.storage import InMemorySessionStore, SessionStore

__all__ = ["SESSION_KEY", "ExperimentSession"]

SESSION_KEY = "metricview-session"


class ExperimentSession:
    """Experiment collection plus selection state for one user session.

    Ingestion is the only asynchronous operation. Callers must await one
    ``ingest`` call before starting the next; the session does no locking.
    """

    def __init__(self, store: SessionStore | None = None, session_key: str = SESSION_KEY) -> None:
        """Initialize an empty session.

        Args:
            store: Key/value store used by save_session/load_session
                   (default: a fresh in-memory store)
            session_key: Key the selection state is saved under
        """
        self.store = store if store is not None else InMemorySessionStore()
        self.session_key = session_key
        self._experiments: ExperimentCollection = EMPTY_COLLECTION
        self._selected_experiment_ids: frozenset[str] = frozenset()
        self._selected_metrics: frozenset[str] = frozenset()
        self._metric_filter = ""
        self._upload_status = UploadStatus()

    # State

    @property
    def experiments(self) -> ExperimentCollection:
        """Read-only mapping of experiment id to Experiment."""
        return self._experiments

    @property
    def selected_experiment_ids(self) -> frozenset[str]:
        return self._selected_experiment_ids

    @property
    def selected_metrics(self) -> frozenset[str]:
        return self._selected_metrics

    @property
    def metric_filter(self) -> str:
        return self._metric_filter

    @property
    def upload_status(self) -> UploadStatus:
        return self._upload_status.model_copy()

    # Derived views

    @property
    def all_metrics(self) -> list[str]:
        """Every metric name across all experiments, sorted."""
        metrics: set[str] = set()
        for experiment in self._experiments.values():
            metrics.update(experiment.metrics)
        return sorted(metrics)

    @property
    def available_metrics_for_selection(self) -> list[str]:
        """Sorted metric names present in any selected experiment."""
        metrics: set[str] = set()
        for experiment in self.selected_experiments:
            metrics.update(experiment.metrics)
        return sorted(metrics)

    @property
    def filtered_metrics(self) -> list[str]:
        """Available metrics whose name contains the filter, ignoring case."""
        available = self.available_metrics_for_selection
        if not self._metric_filter:
            return available
        needle = self._metric_filter.lower()
        return [metric for metric in available if needle in metric.lower()]

    @property
    def chart_series(self) -> list[MetricSeries]:
        """One series per selected (experiment, metric) pair that has data.

        Pairs are ordered by experiment id, then metric name. Selected metrics
        missing from an experiment produce no series.
        """
        if not self._selected_experiment_ids or not self._selected_metrics:
            return []

        series: list[MetricSeries] = []
        metric_names = sorted(self._selected_metrics)
        for experiment in self.selected_experiments:
            for metric_name in metric_names:
                points = experiment.points_for(metric_name)
                if not points:
                    continue
                series.append(
                    MetricSeries(
                        experiment_id=experiment.id,
                        metric_name=metric_name,
                        points=[(point.step, point.value) for point in points],
                    )
                )
        return series

    @property
    def total_data_points(self) -> int:
        return sum(len(experiment.data) for experiment in self._experiments.values())

    @property
    def selected_experiments(self) -> list[Experiment]:
        """Selected experiments, ordered by id."""
        return [self._experiments[experiment_id] for experiment_id in sorted(self._selected_experiment_ids) if experiment_id in self._experiments]

    # Experiment selection

    def toggle_experiment(self, experiment_id: str) -> None:
        """Add or remove one experiment from the selection.

        Any change to the experiment selection clears the metric selection.
        Ids that are not in the collection are ignored.
        """
        if experiment_id not in self._experiments:
            logger.warning(f"Ignoring toggle of unknown experiment: {experiment_id}")
            return
        self._selected_experiment_ids = self._selected_experiment_ids ^ {experiment_id}
        self._selected_metrics = frozenset()

    def select_all_experiments(self) -> None:
        self._selected_experiment_ids = frozenset(self._experiments)
        self._selected_metrics = frozenset()

    def clear_experiment_selection(self) -> None:
        self._selected_experiment_ids = frozenset()
        self._selected_metrics = frozenset()

    # Metric selection

    def toggle_metric(self, metric_name: str) -> None:
        self._selected_metrics = self._selected_metrics ^ {metric_name}

    def select_all_metrics(self) -> None:
        """Select every metric available for the current experiment selection."""
        self._selected_metrics = frozenset(self.available_metrics_for_selection)

    def clear_metric_selection(self) -> None:
        self._selected_metrics = frozenset()

    def set_metric_filter(self, text: str) -> None:
        """Replace the metric name filter. The text is stored as given."""
        self._metric_filter = text

    def clear_selections(self) -> None:
        self._selected_experiment_ids = frozenset()
        self._selected_metrics = frozenset()
        self._metric_filter = ""

    # Data lifecycle

    async def ingest(self, source: CsvSource) -> IngestOutcome:
        """Load a CSV source, replacing the collection only on success.

        On failure the collection and the selections are left untouched and
        the error is recorded in ``upload_status``.

        Args:
            source: File path, raw bytes, or an open file object

        Returns:
            IngestOutcome: success flag with experiment/row counts, or the error
        """
        self._upload_status = UploadStatus(loading=True)

        try:
            result = await parse_csv(source)
        except Exception as e:
            logger.exception("Failed to process CSV source")
            error = str(e) or "Failed to process file"
            self._upload_status = UploadStatus(error=error)
            return IngestOutcome(success=False, error=error)

        if not result.success:
            error = result.error or "Unknown error occurred"
            self._upload_status = UploadStatus(error=error)
            return IngestOutcome(success=False, error=error)

        self._experiments = MappingProxyType(dict(result.experiments))
        self._upload_status = UploadStatus(success=True)
        self.clear_selections()
        return IngestOutcome(
            success=True,
            experiments_count=len(self._experiments),
            total_rows=result.total_rows or 0,
        )

    def clear_all(self) -> None:
        """Drop all data, selections and ingestion status."""
        self._experiments = EMPTY_COLLECTION
        self.clear_selections()
        self._upload_status = UploadStatus()

    # Export

    def export_selected_data(self, output_dir: str | Path, now: datetime | None = None) -> bool:
        """Write the selected rows to ``output_dir/experiment_data_<timestamp>.csv``.

        With no metric selected, every row of the selected experiments is
        exported.

        Returns:
            bool: True if a file was written, False if the selection is empty.
        """
        artifact = build_export(self._experiments, self._selected_experiment_ids, self._selected_metrics, now=now)
        if artifact is None:
            return False
        write_export(artifact, output_dir)
        return True

    # Persistence

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            selected_experiment_ids=sorted(self._selected_experiment_ids),
            selected_metrics=sorted(self._selected_metrics),
            metric_filter=self._metric_filter,
        )

    def save_session(self) -> None:
        """Persist the selection state to the session store."""
        self.store.set(self.session_key, self.snapshot().model_dump_json(by_alias=True))

    def load_session(self) -> None:
        """Restore the selection state from the session store.

        An absent blob leaves the state as it is. A malformed blob is logged
        and resets the selections to empty. Restored experiment ids are limited
        to experiments in the current collection. Never raises.
        """
        try:
            blob = self.store.get(self.session_key)
        except OSError as e:
            logger.warning(f"Failed to load session state: {e}")
            self.clear_selections()
            return

        if blob is None:
            return

        try:
            snapshot = SessionSnapshot.model_validate_json(blob)
        except ValidationError as e:
            logger.warning(f"Failed to load session state: {e.error_count()} validation error(s)")
            self.clear_selections()
            return

        self._selected_experiment_ids = frozenset(experiment_id for experiment_id in snapshot.selected_experiment_ids if experiment_id in self._experiments)
        self._selected_metrics = frozenset(snapshot.selected_metrics)
        self._metric_filter = snapshot.metric_filter
