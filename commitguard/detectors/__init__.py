"""Detector registry for the scanner."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Protocol, Tuple

from commitguard.errors import CatalogueError

MASK_CHAR = "*"
VISIBLE_PREFIX = 4


class Detector(Protocol):
    """Protocol implemented by all secret recognizers."""

    name: str

    def search(self, line: str) -> Optional["re.Match[str]"]:
        """Return the first match of this detector in ``line``, if any."""

    def mask(self, line: str) -> str:
        """Return ``line`` with every match of this detector masked."""


@dataclass(frozen=True)
class RegexDetector:
    """Recognize one secret family by its structural token shape."""

    name: str
    pattern: "re.Pattern[str]"
    redact: bool = True

    def search(self, line: str) -> Optional["re.Match[str]"]:
        return self.pattern.search(line)

    def mask(self, line: str) -> str:
        if not self.redact:
            return line
        return self.pattern.sub(_mask_match, line)


def _mask_match(match: "re.Match[str]") -> str:
    token = match.group(0)
    return token[:VISIBLE_PREFIX] + MASK_CHAR * (len(token) - VISIBLE_PREFIX)


class Catalogue:
    """Immutable, ordered collection of detectors.

    Order only drives report order. Every detector runs against every line,
    whatever the earlier detectors matched.
    """

    def __init__(self, detectors: Iterable[Detector]) -> None:
        items: Tuple[Detector, ...] = tuple(detectors)
        if not items:
            raise CatalogueError("detector catalogue is empty")
        seen = set()
        for detector in items:
            name = getattr(detector, "name", None)
            if not isinstance(name, str) or not name:
                raise CatalogueError(f"detector {detector!r} has no name")
            if name in seen:
                raise CatalogueError(f"duplicate detector name: {name}")
            seen.add(name)
        self._detectors = items

    def __len__(self) -> int:
        return len(self._detectors)

    def __iter__(self) -> Iterator[Detector]:
        return iter(self._detectors)

    @property
    def names(self) -> List[str]:
        return [detector.name for detector in self._detectors]

    def recognize(self, line: str) -> List[str]:
        """Return the name of every detector matching somewhere in ``line``."""

        return [detector.name for detector in self._detectors if detector.search(line)]

    def mask(self, line: str) -> str:
        """Mask every recognized secret in ``line`` while keeping its length."""

        for detector in self._detectors:
            line = detector.mask(line)
        return line


def get_catalogue() -> Catalogue:
    from .catalogue import default_catalogue

    return default_catalogue()


__all__ = ["Catalogue", "Detector", "RegexDetector", "get_catalogue"]
