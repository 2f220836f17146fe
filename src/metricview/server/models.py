"""
Request and response models for the metricview HTTP API.
"""

from pydantic import BaseModel, Field

from metricview.models import Experiment

__all__ = [
    "ExperimentSummary",
    "ExperimentsResponse",
    "FilterUpdateRequest",
    "SelectionResponse",
]


class ExperimentSummary(BaseModel):
    """Overview of one experiment without its data points."""

    id: str
    metrics: list[str]
    data_points: int

    @classmethod
    def from_experiment(cls, experiment: Experiment) -> "ExperimentSummary":
        return cls(id=experiment.id, metrics=sorted(experiment.metrics), data_points=len(experiment.data))


class ExperimentsResponse(BaseModel):
    experiments: list[ExperimentSummary]
    all_metrics: list[str]
    total_data_points: int


class SelectionResponse(BaseModel):
    """Selection state together with the metric lists derived from it."""

    selected_experiment_ids: list[str]
    selected_metrics: list[str]
    metric_filter: str
    available_metrics: list[str]
    filtered_metrics: list[str]


class FilterUpdateRequest(BaseModel):
    filter: str = Field(..., description="Metric name filter, applied as a case-insensitive substring")
