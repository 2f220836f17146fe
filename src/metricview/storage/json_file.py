"""
JsonFileSessionStore - session blobs kept in a single JSON document.

The document maps keys to blob strings and is rewritten atomically on every
change.
"""

from __future__ import annotations

import json
from pathlib import Path

from metricview.logger import logger
from metricview.utils import atomic_write_json

from .base import SessionStore

SESSION_FILE_NAME = "session.json"


class JsonFileSessionStore(SessionStore):
    """Session store persisted to ``<base_dir>/session.json``."""

    def __init__(self, base_dir: str | Path, file_name: str = SESSION_FILE_NAME) -> None:
        """Initialize the store.

        Args:
            base_dir: Directory holding the session file (created on first write)
            file_name: Name of the JSON document inside base_dir
        """
        self.base_dir = Path(base_dir)
        self.path = self.base_dir / file_name

    def _read_all(self) -> dict[str, str]:
        """Read the whole document.

        A missing file is an empty store. An unreadable or malformed file is
        logged and treated as empty so it gets replaced on the next write.
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                content = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        if not isinstance(content, dict):
            logger.warning(f"Ignoring session file {self.path}: expected a JSON object")
            return {}
        return {key: value for key, value in content.items() if isinstance(value, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        blobs = self._read_all()
        blobs[key] = value
        atomic_write_json(self.path, blobs)

    def delete(self, key: str) -> None:
        blobs = self._read_all()
        if key in blobs:
            del blobs[key]
            atomic_write_json(self.path, blobs)
