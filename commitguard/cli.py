"""Command-line entry point for the staged secret scanner."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional, TextIO

from . import hook
from .config import ScanConfig, load_config
from .detectors import get_catalogue
from .engine import Engine
from .errors import CommitGuardError
from .result import Decision, format_report
from .source import ContentSource, GitContentSource

logger = logging.getLogger("commitguard")

EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commitguard",
        description="Block commits whose staged content contains hardcoded secrets.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Staged paths to scan (defaults to every staged file).",
    )
    parser.add_argument(
        "--hook",
        action="store_true",
        help="Read the intercepted tool call and only scan for 'git commit' commands.",
    )
    parser.add_argument(
        "--repo",
        dest="repo_root",
        type=str,
        default=None,
        help="Repository to read the index from (defaults to the working directory).",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=str,
        default=None,
        help="Path to a YAML configuration file (defaults to .commitguard.yaml if present).",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format (defaults to text on stderr).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the JSON report to instead of stdout.",
    )
    parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print matched secrets unmasked in the report.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log skipped files and timings to stderr.",
    )
    return parser


def configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s %(levelname)s: %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def run_scan(
    paths: Optional[List[str]],
    config: ScanConfig,
    source: Optional[ContentSource] = None,
    repo_root: Optional[str] = None,
) -> Decision:
    if source is None:
        source = GitContentSource(Path(repo_root) if repo_root else None, timeout=config.fetch_timeout)
    try:
        engine = Engine(source, catalogue=get_catalogue(), config=config)
    except CommitGuardError as exc:
        logger.error("Scanner misconfigured: %s", exc)
        return Decision.failed(f"scanner misconfigured: {exc}")
    return engine.evaluate(paths or None)


def write_output(decision: Decision, output_path: Optional[str], report_format: str, redact: bool) -> None:
    report = format_report(decision, redact=redact)
    if report:
        print(report, file=sys.stderr)

    if report_format == "json":
        payload = json.dumps(decision.to_dict(redact=redact), indent=2)
        if output_path:
            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(payload, encoding="utf-8")
            print(f"Report written to {output_path}", file=sys.stderr)
        else:
            print(payload)


def main(
    argv: Optional[List[str]] = None,
    source: Optional[ContentSource] = None,
    environ: Optional[Mapping[str, str]] = None,
    stdin: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    environ = os.environ if environ is None else environ

    if args.hook:
        tool_input = hook.read_tool_input(environ, stdin if stdin is not None else sys.stdin)
        if not hook.is_commit_command(hook.extract_command(tool_input)):
            return 0

    try:
        config = load_config(Path(args.config_path) if args.config_path else None, environ)
    except CommitGuardError as exc:
        logger.error("Invalid configuration: %s", exc)
        decision = Decision.failed(f"invalid configuration: {exc}")
        write_output(decision, args.output_path, args.format, redact=True)
        return decision.exit_code()

    redact = config.redact and not args.show_secrets
    try:
        decision = run_scan(args.paths, config, source=source, repo_root=args.repo_root)
    except KeyboardInterrupt:
        print("[commitguard] interrupted; the commit was not scanned.", file=sys.stderr)
        return EXIT_INTERRUPTED
    write_output(decision, args.output_path, args.format, redact=redact)
    return decision.exit_code()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
