"""
Pytest configuration and shared fixtures.
"""

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from metricview.config import reset_resource_limits
from metricview.session import ExperimentSession
from metricview.storage import InMemorySessionStore

SAMPLE_CSV = """experiment_id,metric_name,step,value
baseline,accuracy,0,0.12
baseline,loss,0,0.95
baseline,accuracy,1,0.45
baseline,loss,1,0.75
baseline,accuracy,2,0.78
baseline,loss,2,0.45
wide_lr,accuracy,0,0.22
wide_lr,loss,0,0.85
wide_lr,accuracy,1,0.55
wide_lr,f1,1,0.40
dropout,val_loss,0,1.10
dropout,val_loss,1,0.90
"""


@pytest.fixture(autouse=True)
def clean_env_for_tests(monkeypatch):
    """Clean environment variables for test isolation.

    Ensures tests don't write to the user's real data directory and that
    resource limits are re-read from the (cleaned) environment.
    """
    for name in (
        "METRICVIEW_DATA_DIR",
        "METRICVIEW_SESSION_BACKEND",
        "METRICVIEW_MAX_FILE_SIZE",
        "METRICVIEW_MAX_ROWS",
        "XDG_DATA_HOME",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_resource_limits()
    yield
    reset_resource_limits()


@pytest.fixture
def sample_csv() -> str:
    """Three experiments: baseline (accuracy, loss), wide_lr (accuracy, loss, f1), dropout (val_loss)."""
    return SAMPLE_CSV


@pytest.fixture
def sample_csv_file(tmp_path, sample_csv) -> Path:
    path = tmp_path / "metrics.csv"
    path.write_text(sample_csv)
    return path


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def loaded_session(store, sample_csv) -> ExperimentSession:
    """Session with SAMPLE_CSV ingested and nothing selected."""
    session = ExperimentSession(store=store)
    outcome = asyncio.run(session.ingest(sample_csv.encode()))
    assert outcome.success, outcome.error
    return session
