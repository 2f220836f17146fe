from pathlib import Path

from metricview.config import get_data_dir, get_session_backend

from .base import SessionStore
from .json_file import JsonFileSessionStore
from .memory import InMemorySessionStore

DEFAULT_SESSION_BACKEND = "memory"
_VALID_SESSION_BACKENDS = {"memory", "file"}


def resolve_session_backend(backend: str | None = None) -> str:
    """Resolve the session store backend name.

    Resolution order:
    1. METRICVIEW_SESSION_BACKEND environment variable (if set and valid)
    2. backend argument (if set and valid)
    3. DEFAULT_SESSION_BACKEND ("memory") when neither is set

    Raises:
        ValueError: If METRICVIEW_SESSION_BACKEND or backend is set but invalid.
    """
    env_backend = get_session_backend()

    if env_backend is not None:
        if env_backend in _VALID_SESSION_BACKENDS:
            return env_backend
        msg = f"Invalid METRICVIEW_SESSION_BACKEND value: {env_backend!r}. Valid values are: {sorted(_VALID_SESSION_BACKENDS)}"
        raise ValueError(msg)

    if backend is not None:
        if backend in _VALID_SESSION_BACKENDS:
            return backend
        msg = f"Invalid session backend value: {backend!r}. Valid values are: {sorted(_VALID_SESSION_BACKENDS)}"
        raise ValueError(msg)

    return DEFAULT_SESSION_BACKEND


def create_session_store(backend: str | None = None, *, base_dir: str | Path | None = None) -> SessionStore:
    """Create a session store instance.

    Args:
        backend: 'memory' or 'file'. If None, uses METRICVIEW_SESSION_BACKEND
                 or defaults to 'memory'.
        base_dir: Directory for the 'file' backend. Defaults to get_data_dir().

    Returns:
        SessionStore instance (InMemorySessionStore or JsonFileSessionStore).
    """
    resolved = resolve_session_backend(backend)
    if resolved == "file":
        return JsonFileSessionStore(base_dir if base_dir is not None else get_data_dir())
    return InMemorySessionStore()


__all__ = [
    "InMemorySessionStore",
    "JsonFileSessionStore",
    "SessionStore",
    "create_session_store",
    "resolve_session_backend",
]
