"""
FastAPI dependency injection for the metricview API.

The session lives on ``app.state`` so each application instance owns exactly
one ExperimentSession.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi import Path as PathParam

from metricview.session import ExperimentSession


def get_session(request: Request) -> ExperimentSession:
    """Get the ExperimentSession owned by the running app."""
    return request.app.state.session


def get_known_experiment(
    experiment_id: Annotated[str, PathParam(description="Experiment id")],
    session: Annotated[ExperimentSession, Depends(get_session)],
) -> str:
    """Validate that the experiment id path parameter names a loaded experiment.

    Raises:
        HTTPException: 404 if the experiment is not in the collection.
    """
    if experiment_id not in session.experiments:
        raise HTTPException(status_code=404, detail=f"Experiment '{experiment_id}' not found")
    return experiment_id


SessionDep = Annotated[ExperimentSession, Depends(get_session)]
KnownExperiment = Annotated[str, Depends(get_known_experiment)]
