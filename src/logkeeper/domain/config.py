from __future__ import annotations

"""
Logger Configuration Domain.

Defines the immutable option set captured when a Logger is constructed,
plus helpers to build it from loosely-typed mappings (camelCase or
snake_case keys) and from JSON files on disk. Values are taken as given:
absent or None entries fall back to defaults, nothing else is checked.
"""

import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from logkeeper.domain.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_FILES,
    DEFAULT_MAX_SIZE,
    OPTION_ALIASES,
    RETENTION_ORDER_MTIME,
    TEXT_SINK_SUFFIX,
)
from logkeeper.infra.fs import get_default_log_path, normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Configuration Model
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LoggerConfig:
    """
    Immutable option set for a Logger instance.

    Attributes:
        log_level: Minimum severity forwarded to the console/text sinks.
        log_file: Path of the active NDJSON log file. None resolves to
            '<cwd>/logs/app.log' at construction time.
        max_size: Byte threshold for the rotating text sink.
        max_files: Number of same-prefix files kept by retention.
        enable_console_logging: Echo records on stdout.
        compress_logs: Gzip the active file after every append.
        persist_logs: Append JSON records to the active file.
        text_log_file: Rotating text sink path. None means '<log_file>.txt'.
        retention_order: 'mtime' (oldest modification first) or 'listing'
            (raw directory order).
        truncate_on_start: Empty the active file during construction.
    """
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None
    max_size: int = DEFAULT_MAX_SIZE
    max_files: int = DEFAULT_MAX_FILES
    enable_console_logging: bool = True
    compress_logs: bool = False
    persist_logs: bool = True
    text_log_file: Optional[str] = None
    retention_order: str = RETENTION_ORDER_MTIME
    truncate_on_start: bool = True

    @property
    def resolved_log_file(self) -> str:
        """Absolute path of the active log file, with ~ and $VAR expanded."""
        return normalize_path(self.log_file, fallback=get_default_log_path())

    @property
    def resolved_text_log_file(self) -> str:
        """Absolute path of the rotating text sink."""
        if self.text_log_file:
            return normalize_path(self.text_log_file, fallback=self.resolved_log_file + TEXT_SINK_SUFFIX)
        return self.resolved_log_file + TEXT_SINK_SUFFIX


# -----------------------------------------------------------------------------
# Construction Helpers
# -----------------------------------------------------------------------------

def config_from_mapping(options: Optional[Mapping[str, Any]] = None) -> LoggerConfig:
    """
    Build a LoggerConfig from a mapping of options.

    Accepts public camelCase names ('logFile', 'maxSize', ...) as well as
    attribute names. Unknown keys are ignored and None values keep the
    default.

    Args:
        options: Raw option mapping (e.g. parsed JSON).

    Returns:
        LoggerConfig: The resulting configuration.
    """
    known = {f.name for f in fields(LoggerConfig)}
    kwargs: Dict[str, Any] = {}

    for key, value in (options or {}).items():
        name = OPTION_ALIASES.get(key, key)
        if name not in known:
            logger.debug(f"Ignoring unknown logger option '{key}'")
            continue
        if value is None:
            continue
        kwargs[name] = value

    return LoggerConfig(**kwargs)


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Load a JSON option mapping from disk.

    Fail-safe: a missing, unreadable or malformed file yields an empty
    mapping so callers fall back to defaults.

    Args:
        path: Location of the JSON file.

    Returns:
        Dict[str, Any]: The decoded options, or {} on failure.
    """
    if not os.path.exists(path):
        logger.warning(f"Config file not found: {path}. Using defaults.")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read config file '{path}': {e}. Using defaults.")
        return {}

    if not isinstance(data, dict):
        logger.warning(
            f"Config file '{path}' must contain a JSON object, "
            f"found {type(data).__name__}. Using defaults."
        )
        return {}

    return data
