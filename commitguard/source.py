"""Staged-content collaborators."""

from __future__ import annotations

import logging
import subprocess
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol, Union

from .errors import FetchTimeoutError, NotARepositoryError, SourceError, SourceTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 2.0


class Unavailable(str, Enum):
    """Reasons a collaborator may report instead of content."""

    NOT_FOUND = "not_found"
    BINARY = "binary"


StagedContent = Union[bytes, Unavailable]


class ContentSource(Protocol):
    """Protocol implemented by version-control content backends."""

    def list_staged_files(self) -> List[str]:
        """Return the repository-relative paths staged for the next commit."""

    def get_staged_content(self, path: str) -> StagedContent:
        """Return the staged bytes of ``path`` or an ``Unavailable`` marker."""


class GitContentSource:
    """Read the git index through the ``git`` command line."""

    def __init__(self, repo_root: Optional[Path] = None, timeout: float = DEFAULT_GIT_TIMEOUT) -> None:
        self._repo_root = Path(repo_root) if repo_root is not None else None
        self._timeout = timeout

    def _run(self, args: List[str], timeout: float) -> subprocess.CompletedProcess:
        return subprocess.run(
            ["git", *args],
            cwd=self._repo_root,
            capture_output=True,
            timeout=timeout,
            check=False,
        )

    def list_staged_files(self) -> List[str]:
        self._ensure_repository()
        try:
            process = self._run(["diff", "--cached", "--name-only", "-z"], self._timeout)
        except subprocess.TimeoutExpired as exc:
            raise SourceTimeoutError(f"listing staged files took longer than {self._timeout:g}s") from exc
        if process.returncode != 0:
            raise SourceError(f"git diff --cached failed: {_stderr(process) or process.returncode}")
        entries = process.stdout.decode("utf-8", errors="surrogateescape").split("\0")
        return [entry for entry in entries if entry]

    def _ensure_repository(self) -> None:
        """Raise ``NotARepositoryError`` only when there is no work tree to read."""

        try:
            process = self._run(["rev-parse", "--git-dir"], self._timeout)
        except FileNotFoundError as exc:
            raise NotARepositoryError("git executable not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise SourceTimeoutError(f"locating the repository took longer than {self._timeout:g}s") from exc
        if process.returncode != 0:
            raise NotARepositoryError(_stderr(process) or "not a git repository")

    def get_staged_content(self, path: str) -> StagedContent:
        try:
            process = self._run(["show", f":{path}"], self._timeout)
        except FileNotFoundError as exc:
            raise SourceError("git executable not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise FetchTimeoutError(path, self._timeout) from exc
        if process.returncode != 0:
            logger.debug("git show :%s failed: %s", path, _stderr(process))
            return Unavailable.NOT_FOUND
        return process.stdout


def _stderr(process: subprocess.CompletedProcess) -> str:
    return process.stderr.decode("utf-8", errors="replace").strip()
