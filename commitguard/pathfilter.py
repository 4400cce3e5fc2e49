"""Decide which staged paths are eligible for content scanning."""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DENYLIST_SEGMENTS = frozenset(
    {
        "test",
        "tests",
        "__tests__",
        "testdata",
        "fixture",
        "fixtures",
        "__mocks__",
        "mocks",
        "example",
        "examples",
    }
)
DENYLIST_FILENAME_MARKERS = (".test.", ".spec.")

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "ico", "bmp", "webp", "tiff")
FONT_EXTENSIONS = ("woff", "woff2", "ttf", "otf", "eot")
LOCKFILE_EXTENSIONS = ("lock", "lockb")
SKIPPED_EXTENSIONS = frozenset(IMAGE_EXTENSIONS + FONT_EXTENSIONS + LOCKFILE_EXTENSIONS)
LOCKFILE_NAMES = frozenset({"package-lock.json", "pnpm-lock.yaml", "npm-shrinkwrap.json"})


def normalize_path(path: str) -> str:
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


class PathFilter:
    """Exclude test fixtures, binaries, lockfiles and allow-listed globs."""

    def __init__(self, allow_paths: Iterable[str] = ()) -> None:
        self._allow_paths: Tuple[str, ...] = tuple(allow_paths)

    def is_eligible(self, path: str) -> bool:
        return self.excluded_reason(path) is None

    def excluded_reason(self, path: str) -> Optional[str]:
        """Return why ``path`` is not scanned, or ``None`` when it is eligible."""

        normalized = normalize_path(path)
        segments = [segment for segment in normalized.split("/") if segment]
        if not segments:
            return "empty path"
        filename = segments[-1].lower()

        for segment in segments[:-1]:
            if segment.lower() in DENYLIST_SEGMENTS:
                return f"test or example directory '{segment}'"
        for marker in DENYLIST_FILENAME_MARKERS:
            if marker in filename:
                return f"test file marker '{marker}'"

        if filename in LOCKFILE_NAMES:
            return "lockfile"
        if "." in filename:
            extension = filename.rsplit(".", 1)[1]
            if extension in SKIPPED_EXTENSIONS:
                return f"binary or lockfile extension '.{extension}'"

        for pattern in self._allow_paths:
            if fnmatchcase(normalized, pattern):
                return f"allow-listed by '{pattern}'"
        return None

    def filter(self, paths: Iterable[str]) -> List[str]:
        """Return the eligible paths, preserving their order."""

        eligible: List[str] = []
        for path in paths:
            reason = self.excluded_reason(path)
            if reason is None:
                eligible.append(path)
            else:
                logger.debug("Skipping %s: %s", path, reason)
        return eligible
