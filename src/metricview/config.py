"""Configuration and environment handling for metricview."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

__all__ = [
    "ResourceLimits",
    "get_data_dir",
    "get_resource_limits",
    "get_session_backend",
    "reset_resource_limits",
]


class ResourceLimits(BaseModel):
    """Resource limits applied while ingesting CSV files.

    All limits can be customized via environment variables.
    """

    max_file_size: int = Field(
        default=512 * 1024 * 1024,  # 512MB
        description="Maximum CSV source size in bytes",
    )

    max_rows: int = Field(
        default=5_000_000,
        description="Maximum number of data rows accepted from one CSV source",
    )

    @classmethod
    def from_env(cls) -> "ResourceLimits":
        """Create ResourceLimits from environment variables.

        Environment variables:
        - METRICVIEW_MAX_FILE_SIZE: Maximum CSV size in bytes (default: 512MB)
        - METRICVIEW_MAX_ROWS: Maximum data rows (default: 5M)
        """
        return cls(
            max_file_size=int(os.environ.get("METRICVIEW_MAX_FILE_SIZE", cls.model_fields["max_file_size"].default)),
            max_rows=int(os.environ.get("METRICVIEW_MAX_ROWS", cls.model_fields["max_rows"].default)),
        )


_resource_limits: ResourceLimits | None = None


def get_resource_limits() -> ResourceLimits:
    """Get resource limits configuration.

    Returns cached instance if already initialized.
    """
    global _resource_limits
    if _resource_limits is None:
        _resource_limits = ResourceLimits.from_env()
    return _resource_limits


def reset_resource_limits() -> None:
    """Drop the cached limits so the next access re-reads the environment."""
    global _resource_limits
    _resource_limits = None


# Forbidden system directories that cannot be used as data directories
_FORBIDDEN_PATHS = frozenset(["/", "/etc", "/sys", "/dev", "/bin", "/sbin", "/usr", "/var", "/boot", "/proc"])


def _validate_data_dir(data_path: Path) -> None:
    """Validate that data directory is not a dangerous system path.

    Raises:
        ValueError: If path is a forbidden system directory
    """
    resolved_str = str(data_path.resolve())

    for forbidden in _FORBIDDEN_PATHS:
        if resolved_str == forbidden or resolved_str.rstrip("/") == forbidden:
            raise ValueError(f"METRICVIEW_DATA_DIR cannot be set to system directory: {forbidden}")


def get_data_dir() -> Path:
    """Get the data directory used for saved sessions.

    Resolution priority:
    1. METRICVIEW_DATA_DIR environment variable (if set)
    2. XDG_DATA_HOME/metricview (if XDG_DATA_HOME is set)
    3. ~/.local/share/metricview (fallback)

    Raises:
        ValueError: If METRICVIEW_DATA_DIR points to a system directory
    """
    data_dir = os.environ.get("METRICVIEW_DATA_DIR")
    if data_dir:
        data_path = Path(data_dir).expanduser().resolve()
        _validate_data_dir(data_path)
        return data_path

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home).expanduser() / "metricview"

    return Path.home() / ".local" / "share" / "metricview"


def get_session_backend() -> str | None:
    """Get session store backend from environment variable.

    Returns:
        Backend name if METRICVIEW_SESSION_BACKEND is set, None otherwise.
    """
    return os.environ.get("METRICVIEW_SESSION_BACKEND")
