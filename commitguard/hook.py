"""Helpers for running the scanner from a pre-tool-use hook host.

The host passes the intercepted tool call as JSON, either through the
``CLAUDE_TOOL_INPUT`` environment variable or on stdin. Only ``git commit``
commands are gated; everything else passes straight through.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional, TextIO

logger = logging.getLogger(__name__)

TOOL_INPUT_ENV = "CLAUDE_TOOL_INPUT"
COMMIT_COMMAND = re.compile(r"^git\s+commit\b")


def read_tool_input(environ: Mapping[str, str], stdin: Optional[TextIO] = None) -> Dict[str, Any]:
    """Return the tool-input payload, or an empty mapping when none is usable."""

    raw = environ.get(TOOL_INPUT_ENV)
    if raw is None and stdin is not None and not stdin.isatty():
        raw = stdin.read()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring malformed tool input: %s", exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def extract_command(tool_input: Mapping[str, Any]) -> str:
    command = tool_input.get("command")
    if not isinstance(command, str):
        return ""
    return command.strip()


def is_commit_command(command: str) -> bool:
    return bool(COMMIT_COMMAND.match(command))
