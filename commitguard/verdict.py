"""Verdict definitions for scan decisions."""

from __future__ import annotations

from enum import Enum


class Verdict(str, Enum):
    """Enumerate the possible outcomes of an evaluation."""

    ALLOW = "ALLOW"
    BLOCK = "BLOCK"
    ERROR = "ERROR"

    @property
    def exit_code(self) -> int:
        """Return the process exit code reported to the commit hook host."""

        ordering = {
            Verdict.ALLOW: 0,
            Verdict.BLOCK: 2,
            Verdict.ERROR: 1,
        }
        return ordering[self]
