"""Turn collaborator output into scannable text or a skip."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .errors import SourceError
from .source import ContentSource, Unavailable
from .utils import decode_text, looks_binary

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_BYTES = 1024 * 1024


class SkipReason(str, Enum):
    NOT_FOUND = "not_found"
    BINARY = "binary"
    OVERSIZE = "oversize"
    UNDECODABLE = "undecodable"
    SOURCE_ERROR = "source_error"


@dataclass(frozen=True)
class Fetched:
    path: str
    text: str


@dataclass(frozen=True)
class Skipped:
    path: str
    reason: SkipReason
    detail: str = ""


FetchResult = Union[Fetched, Skipped]


class ContentFetcher:
    """Fetch staged text for one path without ever failing the whole run.

    Timeouts and collaborator-level ``SourceError``s are the exception: they
    propagate so the caller can fail closed instead of letting an unscanned
    file through.
    """

    def __init__(self, source: ContentSource, max_bytes: int = DEFAULT_MAX_FILE_BYTES) -> None:
        self._source = source
        self._max_bytes = max_bytes

    def fetch(self, path: str) -> FetchResult:
        try:
            content = self._source.get_staged_content(path)
        except SourceError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Could not read staged content of %s: %s", path, exc)
            return Skipped(path, SkipReason.SOURCE_ERROR, str(exc))

        if content is Unavailable.NOT_FOUND or content is None:
            return self._skip(path, SkipReason.NOT_FOUND)
        if content is Unavailable.BINARY:
            return self._skip(path, SkipReason.BINARY)
        if len(content) > self._max_bytes:
            return self._skip(path, SkipReason.OVERSIZE, f"{len(content)} bytes > {self._max_bytes}")
        if looks_binary(content):
            return self._skip(path, SkipReason.BINARY)
        text = decode_text(content)
        if text is None:
            return self._skip(path, SkipReason.UNDECODABLE)
        return Fetched(path, text)

    def _skip(self, path: str, reason: SkipReason, detail: str = "") -> Skipped:
        logger.debug("Skipping %s: %s %s", path, reason.value, detail)
        return Skipped(path, reason, detail)
