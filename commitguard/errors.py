"""Exception hierarchy for the scanner."""

from __future__ import annotations


class CommitGuardError(Exception):
    """Base class for scanner failures."""


class CatalogueError(CommitGuardError):
    """The detector catalogue is misconfigured."""


class ConfigError(CommitGuardError):
    """The scanner configuration could not be loaded or is invalid."""


class SourceError(CommitGuardError):
    """The staged-content collaborator failed."""


class NotARepositoryError(SourceError):
    """Staged files cannot be listed because there is no repository."""


class SourceTimeoutError(SourceError):
    """Listing staged files did not finish in time."""


class FetchTimeoutError(SourceError):
    """Fetching staged content for a single file did not finish in time."""

    def __init__(self, path: str, timeout: float) -> None:
        super().__init__(f"timed out after {timeout:g}s reading staged content of {path}")
        self.path = path
        self.timeout = timeout


class ScanTimeoutError(CommitGuardError):
    """The evaluation exceeded its wall-clock budget."""
