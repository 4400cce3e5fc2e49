"""Scan staged content and turn the matches into a commit decision."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Iterable, List, Optional

from .config import ScanConfig
from .detectors import Catalogue, get_catalogue
from .errors import CommitGuardError, FetchTimeoutError, NotARepositoryError, ScanTimeoutError
from .fetcher import ContentFetcher, Skipped
from .pathfilter import PathFilter
from .result import Decision, Finding, aggregate, make_snippet
from .source import ContentSource, GitContentSource

logger = logging.getLogger(__name__)


def scan_text(path: str, text: str, catalogue: Catalogue) -> List[Finding]:
    """Return one finding per detector per matching line of ``text``.

    Lines are split on ``\\n`` only and numbered from 1.
    """

    findings: List[Finding] = []
    for number, line in enumerate(text.split("\n"), start=1):
        names = catalogue.recognize(line)
        if not names:
            continue
        snippet = make_snippet(line)
        masked = make_snippet(catalogue.mask(line))
        for name in names:
            findings.append(Finding(path=path, line=number, detector=name, snippet=snippet, masked_snippet=masked))
    return findings


class Engine:
    """Evaluate a staged snapshot against the detector catalogue.

    The engine keeps no state between evaluations; every call lists, fetches
    and scans from scratch.
    """

    def __init__(
        self,
        source: ContentSource,
        catalogue: Optional[Catalogue] = None,
        config: Optional[ScanConfig] = None,
        path_filter: Optional[PathFilter] = None,
    ) -> None:
        self._source = source
        self._catalogue = catalogue if catalogue is not None else get_catalogue()
        self._config = config or ScanConfig()
        self._filter = path_filter or PathFilter(self._config.allow_paths)
        self._fetcher = ContentFetcher(source, max_bytes=self._config.max_file_bytes)

    def evaluate(self, paths: Optional[Iterable[str]] = None) -> Decision:
        started = time.monotonic()
        try:
            staged = list(paths) if paths is not None else list(self._source.list_staged_files())
        except NotARepositoryError as exc:
            logger.debug("Nothing to scan, staged files unavailable: %s", exc)
            return Decision()
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Listing staged files failed: %s", exc)
            return Decision.failed(f"could not list staged files: {exc}")

        if not staged:
            logger.debug("No staged files")
            return Decision()

        eligible = self._filter.filter(staged)
        try:
            findings = self._scan_paths(eligible, deadline=started + self._config.total_timeout)
        except CommitGuardError as exc:
            logger.error("Secret scan failed closed: %s", exc)
            return Decision.failed(str(exc))
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unexpected scanner failure")
            return Decision.failed(f"internal scanner error: {exc}")

        decision = aggregate(findings)
        logger.debug(
            "Scanned %d of %d staged files in %.3fs: %d findings",
            len(eligible),
            len(staged),
            time.monotonic() - started,
            len(decision.findings),
        )
        return decision

    def _scan_paths(self, paths: List[str], deadline: float) -> List[Finding]:
        findings: List[Finding] = []
        if not paths:
            return findings

        fetch_timeout = self._config.fetch_timeout
        executor = ThreadPoolExecutor(
            max_workers=min(self._config.workers, len(paths)),
            thread_name_prefix="commitguard-fetch",
        )
        try:
            futures = [(path, executor.submit(self._fetcher.fetch, path)) for path in paths]
            for path, future in futures:
                remaining = deadline - time.monotonic()
                if future.done():
                    wait = fetch_timeout
                elif remaining <= 0:
                    raise ScanTimeoutError(self._budget_message(path))
                else:
                    wait = min(fetch_timeout, remaining)
                try:
                    result = future.result(timeout=wait)
                except FuturesTimeoutError as exc:
                    if wait < fetch_timeout:
                        raise ScanTimeoutError(self._budget_message(path)) from exc
                    raise FetchTimeoutError(path, fetch_timeout) from exc
                if isinstance(result, Skipped):
                    continue
                findings.extend(scan_text(path, result.text, self._catalogue))
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return findings

    def _budget_message(self, path: str) -> str:
        return f"scan exceeded its {self._config.total_timeout:g}s budget while reading {path}"


def evaluate(
    paths: Optional[Iterable[str]] = None,
    source: Optional[ContentSource] = None,
    config: Optional[ScanConfig] = None,
    catalogue: Optional[Catalogue] = None,
) -> Decision:
    """Evaluate ``paths`` (or the whole staged set) with a one-off engine."""

    config = config or ScanConfig()
    if source is None:
        source = GitContentSource(timeout=config.fetch_timeout)
    return Engine(source, catalogue=catalogue, config=config).evaluate(paths)
