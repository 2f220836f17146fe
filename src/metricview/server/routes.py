"""
REST API routes for metricview.

- Experiment upload, listing and clearing
- Experiment and metric selection
- Chart series and CSV export
- Saving and restoring the selection state
"""

from __future__ import annotations

import logging
import urllib.parse

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from metricview.config import get_resource_limits
from metricview.export import build_export
from metricview.models import IngestOutcome, MetricSeries, UploadStatus
from metricview.session import ExperimentSession

from .dependencies import KnownExperiment, SessionDep
from .models import ExperimentsResponse, ExperimentSummary, FilterUpdateRequest, SelectionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _selection(session: ExperimentSession) -> SelectionResponse:
    return SelectionResponse(
        selected_experiment_ids=sorted(session.selected_experiment_ids),
        selected_metrics=sorted(session.selected_metrics),
        metric_filter=session.metric_filter,
        available_metrics=session.available_metrics_for_selection,
        filtered_metrics=session.filtered_metrics,
    )


@router.post("/experiments/upload", response_model=IngestOutcome)
async def upload_experiments(request: Request, session: SessionDep) -> JSONResponse:
    """Ingest the raw CSV request body.

    Returns:
        The ingestion outcome; status 400 when the CSV is rejected, in which
        case the previously loaded experiments remain in place.

    Raises:
        HTTPException: 413 if the body exceeds the configured file size limit.
    """
    limits = get_resource_limits()
    content_length = request.headers.get("content-length")
    if content_length is not None and content_length.isdigit() and int(content_length) > limits.max_file_size:
        raise HTTPException(status_code=413, detail=f"Upload exceeds maximum size of {limits.max_file_size} bytes")

    body = await request.body()
    outcome = await session.ingest(body)
    status_code = 200 if outcome.success else 400
    return JSONResponse(status_code=status_code, content=outcome.model_dump())


@router.get("/experiments")
async def list_experiments(session: SessionDep) -> ExperimentsResponse:
    experiments = [ExperimentSummary.from_experiment(session.experiments[key]) for key in sorted(session.experiments)]
    return ExperimentsResponse(
        experiments=experiments,
        all_metrics=session.all_metrics,
        total_data_points=session.total_data_points,
    )


@router.delete("/experiments")
async def clear_experiments(session: SessionDep) -> dict[str, str]:
    session.clear_all()
    return {"message": "All experiments cleared"}


@router.get("/status")
async def upload_status(session: SessionDep) -> UploadStatus:
    return session.upload_status


@router.get("/selection")
async def get_selection(session: SessionDep) -> SelectionResponse:
    return _selection(session)


@router.delete("/selection")
async def clear_selection(session: SessionDep) -> SelectionResponse:
    session.clear_selections()
    return _selection(session)


@router.post("/selection/experiments/all")
async def select_all_experiments(session: SessionDep) -> SelectionResponse:
    session.select_all_experiments()
    return _selection(session)


@router.delete("/selection/experiments")
async def clear_experiment_selection(session: SessionDep) -> SelectionResponse:
    session.clear_experiment_selection()
    return _selection(session)


@router.post("/selection/experiments/{experiment_id}/toggle")
async def toggle_experiment(experiment_id: KnownExperiment, session: SessionDep) -> SelectionResponse:
    """Toggle one experiment. Raises 404 for ids that were never loaded."""
    session.toggle_experiment(experiment_id)
    return _selection(session)


@router.post("/selection/metrics/all")
async def select_all_metrics(session: SessionDep) -> SelectionResponse:
    session.select_all_metrics()
    return _selection(session)


@router.delete("/selection/metrics")
async def clear_metric_selection(session: SessionDep) -> SelectionResponse:
    session.clear_metric_selection()
    return _selection(session)


@router.post("/selection/metrics/{metric_name}/toggle")
async def toggle_metric(metric_name: str, session: SessionDep) -> SelectionResponse:
    session.toggle_metric(metric_name)
    return _selection(session)


@router.put("/selection/filter")
async def set_metric_filter(update: FilterUpdateRequest, session: SessionDep) -> SelectionResponse:
    session.set_metric_filter(update.filter)
    return _selection(session)


@router.get("/series")
async def chart_series(session: SessionDep) -> list[MetricSeries]:
    return session.chart_series


@router.get("/export")
async def export_selection(session: SessionDep) -> Response:
    """Download the selected rows as CSV.

    Filename format: `experiment_data_<timestamp>.csv`

    Raises:
        HTTPException: 404 if the selection contains no rows.
    """
    artifact = build_export(session.experiments, session.selected_experiment_ids, session.selected_metrics)
    if artifact is None:
        raise HTTPException(status_code=404, detail="No data selected for export")

    logger.info(f"Exporting {artifact.row_count} rows as {artifact.filename}")
    encoded_filename = urllib.parse.quote(artifact.filename, safe="")
    return Response(
        content=artifact.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{encoded_filename}"},
    )


@router.post("/session/save")
async def save_session(session: SessionDep) -> SelectionResponse:
    session.save_session()
    return _selection(session)


@router.post("/session/load")
async def load_session(session: SessionDep) -> SelectionResponse:
    session.load_session()
    return _selection(session)
