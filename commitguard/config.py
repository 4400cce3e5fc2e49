"""Scanner configuration loaded from YAML and environment overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .fetcher import DEFAULT_MAX_FILE_BYTES
from .utils import read_yaml_file

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".commitguard.yaml"
ENV_PREFIX = "COMMITGUARD_"
BLANKET_GLOBS = frozenset({"*", "**", "**/*", "*/*", "*/**"})


@dataclass(frozen=True)
class ScanConfig:
    """Tunables for one evaluation."""

    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    fetch_timeout: float = 2.0
    total_timeout: float = 5.0
    workers: int = 4
    allow_paths: Tuple[str, ...] = field(default_factory=tuple)
    redact: bool = True

    def __post_init__(self) -> None:
        for name in ("max_file_bytes", "workers"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        for name in ("fetch_timeout", "total_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"{name} must be a positive number of seconds, got {value!r}")
        if not isinstance(self.redact, bool):
            raise ConfigError(f"redact must be true or false, got {self.redact!r}")
        validate_allow_paths(self.allow_paths)


def validate_allow_paths(patterns: Tuple[str, ...]) -> None:
    """Reject allow-list globs that are empty or would exclude every file."""

    errors = []
    for pattern in patterns:
        if not isinstance(pattern, str) or not pattern.strip():
            errors.append(f"{pattern!r}: allow-list entries must be non-empty strings")
        elif pattern.strip() in BLANKET_GLOBS:
            errors.append(f"{pattern}: matches every path and would disable scanning")
    if errors:
        raise ConfigError("invalid allow_paths:\n" + "\n".join(errors))


_FIELD_NAMES = {item.name for item in fields(ScanConfig)}
_ENV_CASTS = {
    "max_file_bytes": int,
    "fetch_timeout": float,
    "total_timeout": float,
    "workers": int,
}


def _from_mapping(data: Mapping[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(data) - _FIELD_NAMES, key=str)
    if unknown:
        raise ConfigError(f"unknown configuration keys: {', '.join(map(str, unknown))}")
    values = dict(data)
    if "allow_paths" in values:
        allow = values["allow_paths"]
        if allow is None:
            allow = []
        elif isinstance(allow, str):
            allow = [allow]
        elif not isinstance(allow, (list, tuple)):
            raise ConfigError("allow_paths must be a list of glob patterns")
        values["allow_paths"] = tuple(allow)
    return values


def _from_environ(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name, cast in _ENV_CASTS.items():
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is None or raw == "":
            continue
        try:
            values[name] = cast(raw)
        except ValueError as exc:
            raise ConfigError(f"{ENV_PREFIX}{name.upper()}={raw!r} is not a valid {cast.__name__}") from exc
    return values


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> ScanConfig:
    """Load configuration once per invocation.

    ``path`` defaults to ``.commitguard.yaml`` in the working directory and is
    optional unless given explicitly. Environment variables win over the file.
    """

    environ = os.environ if environ is None else environ
    explicit = path is not None
    config_path = Path(path) if explicit else Path(CONFIG_FILENAME)

    if explicit and not config_path.exists():
        raise ConfigError(f"configuration file not found: {config_path}")
    try:
        data = read_yaml_file(config_path)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"could not read {config_path}: {exc}") from exc

    values: Dict[str, Any] = {}
    if data is not None:
        if not isinstance(data, dict):
            raise ConfigError(f"configuration at {config_path} is not a mapping")
        values.update(_from_mapping(data))
        logger.debug("Loaded configuration from %s", config_path)
    values.update(_from_environ(environ))
    return replace(ScanConfig(), **values)
