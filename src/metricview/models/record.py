"""
Core data models for validated experiment data.

A ``DataPoint`` is one validated CSV row. An ``Experiment`` groups every data
point sharing an experiment id, ordered by step.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from operator import attrgetter
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = ["DataPoint", "Experiment", "ExperimentCollection", "EMPTY_COLLECTION"]


class DataPoint(BaseModel):
    """A single validated measurement: one metric of one experiment at one step."""

    model_config = ConfigDict(frozen=True)

    experiment_id: str = Field(..., min_length=1, description="Experiment identifier")
    metric_name: str = Field(..., min_length=1, description="Metric name")
    step: int = Field(..., ge=0, description="Non-negative step (e.g. training iteration)")
    value: float = Field(..., description="Measured value")

    def __str__(self) -> str:
        return f"DataPoint({self.experiment_id}, {self.metric_name}, step={self.step}, value={self.value})"


class Experiment(BaseModel):
    """All data points recorded for one experiment id.

    ``data`` is sorted by step; points sharing a step keep their input order.
    ``metrics`` is exactly the set of metric names present in ``data``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Experiment identifier")
    metrics: frozenset[str] = Field(default_factory=frozenset, description="Distinct metric names in data")
    data: tuple[DataPoint, ...] = Field(default=(), description="Data points ordered by step")

    @model_validator(mode="after")
    def _check_consistency(self) -> Experiment:
        previous_step = -1
        names: set[str] = set()
        for point in self.data:
            if point.experiment_id != self.id:
                raise ValueError(f"data point for {point.experiment_id!r} does not belong to experiment {self.id!r}")
            if point.step < previous_step:
                raise ValueError(f"data of experiment {self.id!r} is not sorted by step")
            previous_step = point.step
            names.add(point.metric_name)
        if names != self.metrics:
            raise ValueError(f"metrics of experiment {self.id!r} do not match its data")
        return self

    @classmethod
    def from_points(cls, experiment_id: str, points: Iterable[DataPoint]) -> Experiment:
        """Build an experiment from points in input order.

        Points are stable-sorted by step, so equal steps retain input order.
        """
        ordered = tuple(sorted(points, key=attrgetter("step")))
        return cls(
            id=experiment_id,
            metrics=frozenset(point.metric_name for point in ordered),
            data=ordered,
        )

    def points_for(self, metric_name: str) -> list[DataPoint]:
        """Return this experiment's points for one metric, in step order."""
        return [point for point in self.data if point.metric_name == metric_name]


# Read-only mapping of experiment id to Experiment
ExperimentCollection = Mapping[str, Experiment]

EMPTY_COLLECTION: ExperimentCollection = MappingProxyType({})
