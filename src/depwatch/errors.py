"""Exception taxonomy for the catalog acquisition path.

Everything here is caught at the acquirer boundary and converted into an
empty catalog; the match engine never sees these.
"""
from __future__ import annotations

from pathlib import Path


class DepwatchError(RuntimeError):
    """Base class for deprecation-watcher failures."""


class FetchError(DepwatchError):
    """Remote document could not be retrieved."""

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        prefix = f"HTTP {status}" if status is not None else "transport error"
        super().__init__(f"{prefix}: {message}")


class NoModelAvailable(DepwatchError):
    """The text-generation capability is absent or unusable."""


class NoStructuredBlock(DepwatchError):
    """Model response contains no fenced ``json`` block."""


class MalformedRecords(DepwatchError):
    """Fenced block is not a JSON array."""


class CatalogNotFound(DepwatchError):
    """No persisted catalog for the requested version."""


class CorruptCatalog(DepwatchError):
    """Persisted catalog exists but does not decode into records."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"corrupt catalog at {path}: {reason}")
