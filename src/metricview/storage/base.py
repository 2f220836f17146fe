"""
SessionStore - Abstract base class for session persistence.

A session store is an opaque key/value store of text blobs. It knows
nothing about what the blobs contain; encoding and decoding the selection
state is the session's job.
"""

from abc import ABC, abstractmethod


class SessionStore(ABC):
    """Abstract base class for key/value blob storage."""

    @abstractmethod
    def get(self, key: str) -> str | None:  # pragma: no cover - interface only
        """Return the blob stored under ``key``, or None if absent."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:  # pragma: no cover - interface only
        """Store ``value`` under ``key``, replacing any previous blob."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:  # pragma: no cover - interface only
        """Remove ``key`` if present."""
        raise NotImplementedError
