"""In-process session store."""

from .base import SessionStore


class InMemorySessionStore(SessionStore):
    """Session store backed by a dictionary; contents vanish with the process."""

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._blobs.get(key)

    def set(self, key: str, value: str) -> None:
        self._blobs[key] = value

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)
