"""Basic file IO and byte-decoding helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml

BINARY_SNIFF_BYTES = 8000
UTF8_BOM = b"\xef\xbb\xbf"


def read_yaml_file(path: Path) -> Any:
    """Return the parsed YAML if the file exists, otherwise ``None``."""

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def looks_binary(data: bytes) -> bool:
    """Apply git's heuristic: a NUL byte near the start means binary."""

    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def decode_text(data: bytes) -> Optional[str]:
    """Decode staged bytes as strict UTF-8, or return ``None`` when impossible."""

    if data.startswith(UTF8_BOM):
        data = data[len(UTF8_BOM):]
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None
