"""Derived chart series model."""

from pydantic import BaseModel, Field


class MetricSeries(BaseModel):
    """Step-ordered values of one metric for one experiment.

    Series are derived from the experiment collection and the current
    selection on every read; they are never stored.
    """

    experiment_id: str
    metric_name: str
    points: list[tuple[int, float]] = Field(default_factory=list, description="(step, value) pairs sorted by step")

    @property
    def steps(self) -> list[int]:
        return [step for step, _ in self.points]

    @property
    def values(self) -> list[float]:
        return [value for _, value in self.points]
