"""Core result data structures and report rendering for the scanner."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional, Tuple

from .verdict import Verdict

SNIPPET_LENGTH = 80
REPORT_PREFIX = "[commitguard]"
REMEDIATION_HINT = "Fix: Remove secrets, use environment variables instead."
OVERRIDE_HINT = "Override: git commit --no-verify (NOT recommended)"


@dataclass(frozen=True)
class Finding:
    """One located, attributed match of secret-shaped text."""

    path: str
    line: int
    detector: str
    snippet: str
    masked_snippet: str = ""

    def to_dict(self, redact: bool = True) -> Dict[str, object]:
        data = asdict(self)
        data.pop("masked_snippet")
        if redact:
            data["snippet"] = self.masked_snippet or self.snippet
        return data


def make_snippet(line: str) -> str:
    return line[:SNIPPET_LENGTH].strip()


@dataclass(frozen=True)
class Decision:
    """Outcome of one evaluation.

    A completed scan blocks exactly when it produced findings. A scan that
    could not complete carries ``error`` and always blocks.
    """

    findings: Tuple[Finding, ...] = ()
    error: Optional[str] = None

    @classmethod
    def failed(cls, diagnostic: str) -> "Decision":
        return cls(findings=(), error=diagnostic)

    @property
    def blocked(self) -> bool:
        return bool(self.findings) or self.error is not None

    @property
    def verdict(self) -> Verdict:
        if self.error is not None:
            return Verdict.ERROR
        if self.findings:
            return Verdict.BLOCK
        return Verdict.ALLOW

    def exit_code(self) -> int:
        return self.verdict.exit_code

    def summary(self) -> Dict[str, int]:
        """Count findings per detector, in first-seen order."""

        return dict(Counter(finding.detector for finding in self.findings))

    def to_dict(self, redact: bool = True) -> Dict[str, object]:
        return {
            "verdict": self.verdict.value,
            "blocked": self.blocked,
            "error": self.error,
            "summary": self.summary(),
            "findings": [finding.to_dict(redact=redact) for finding in self.findings],
        }


def aggregate(findings: Iterable[Finding]) -> Decision:
    """Build a decision from findings, keeping their discovery order."""

    return Decision(findings=tuple(findings))


def format_report(decision: Decision, redact: bool = True) -> str:
    """Create the human-readable report printed when a commit is blocked."""

    if decision.error is not None:
        return "\n".join(
            [
                "",
                f"{REPORT_PREFIX} BLOCKED: the secret scan could not complete.",
                f"  Reason: {decision.error}",
                "  No secrets were reported; the commit is blocked because staged content was not fully scanned.",
                "  Retry the commit, or investigate the repository state if this keeps happening.",
                f"  {OVERRIDE_HINT}",
                "",
            ]
        )
    if not decision.findings:
        return ""

    lines: List[str] = ["", f"{REPORT_PREFIX} BLOCKED: hardcoded secrets detected in staged files:", ""]
    for finding in decision.findings:
        snippet = finding.masked_snippet if redact and finding.masked_snippet else finding.snippet
        lines.append(f"  {finding.path}:{finding.line} — {finding.detector}")
        lines.append(f"    {snippet}...")
    lines.append("")
    lines.append(f"  {REMEDIATION_HINT}")
    lines.append(f"  {OVERRIDE_HINT}")
    lines.append("")
    return "\n".join(lines)
