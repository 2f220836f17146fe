"""
FastAPI application exposing one ExperimentSession over HTTP.
"""

from __future__ import annotations

from fastapi import FastAPI

from metricview.session import ExperimentSession
from metricview.storage import create_session_store

from .routes import router

__all__ = ["create_app"]


def create_app(session: ExperimentSession | None = None) -> FastAPI:
    """Create the API application.

    Args:
        session: Session served by the app. Defaults to a new session using
                 the store selected by create_session_store().

    Returns:
        FastAPI application with the session stored on ``app.state``.
    """
    app = FastAPI(
        title="metricview",
        description="Experiment metric CSV ingestion, selection and export",
    )
    app.state.session = session if session is not None else ExperimentSession(store=create_session_store())
    app.include_router(router)
    return app
