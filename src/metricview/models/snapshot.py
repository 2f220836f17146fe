"""Persisted selection state."""

from pydantic import BaseModel, ConfigDict, Field


class SessionSnapshot(BaseModel):
    """Selection state as stored in the session store.

    Field names match the stored JSON blob.
    """

    model_config = ConfigDict(populate_by_name=True)

    selected_experiment_ids: list[str] = Field(default_factory=list, alias="selectedExperimentIds")
    selected_metrics: list[str] = Field(default_factory=list, alias="selectedMetrics")
    metric_filter: str = Field(default="", alias="metricFilter")
