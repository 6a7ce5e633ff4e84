from __future__ import annotations

"""
Logging Handlers and Low-Level Utilities.

Provides the sink formatter, handler factories and internal tagging
mechanisms so the package can distinguish its own logging infrastructure
from external or library-injected handlers.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, TextIO

from logkeeper.domain.constants import SINK_DATEFMT
from logkeeper.domain.records import json_default
from logkeeper.infra.fs import ensure_parent_dir
from logkeeper.infra.logging.config import _LEVEL_LABELS

# Internal attribute used to tag and identify our own handlers
_HANDLER_TAG_ATTR: str = "_logkeeper_handler"

# LogRecord attribute carrying the caller's metadata mapping
METADATA_ATTR: str = "metadata"


# ==============================================================================
# FORMATTERS
# ==============================================================================

class SinkFormatter(logging.Formatter):
    """
    Render records as '[<timestamp>] [<LEVEL>]: <message> <metadata-json>'.

    The metadata part is empty when the record carries none.
    """

    def __init__(self, datefmt: str = SINK_DATEFMT) -> None:
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.datefmt)
        label = _LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"[{timestamp}] [{label}]: {record.getMessage()} {_render_metadata(getattr(record, METADATA_ATTR, None))}"


def _render_metadata(metadata: Optional[dict]) -> str:
    """Encode metadata as JSON, or its repr when JSON cannot represent it."""
    if not metadata:
        return ""
    try:
        return json.dumps(metadata, ensure_ascii=False, default=json_default)
    except (TypeError, ValueError):
        return str(metadata)


# ==============================================================================
# INTERNAL LOGGING UTILITIES
# ==============================================================================

def _tag_handler(handler: logging.Handler) -> None:
    """
    Mark a handler as an internally-managed handler.

    Args:
        handler: The logging handler instance to tag.
    """
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    """
    Verify if a handler was initialized by this package.

    Args:
        handler: The handler to inspect.

    Returns:
        bool: True if the handler carries our internal tag.
    """
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_stream_handler(
        level_int: int,
        formatter: logging.Formatter,
        stream: Optional[TextIO] = None,
) -> logging.StreamHandler:
    """Initialize a tagged StreamHandler (stdout unless a stream is given)."""
    sh = logging.StreamHandler(stream if stream is not None else sys.stdout)
    sh.setLevel(level_int)
    sh.setFormatter(formatter)
    _tag_handler(sh)
    return sh


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Initialize a RotatingFileHandler with robust error handling.

    Args:
        log_file: Target path for the log file.
        level_int: Numeric logging level.
        formatter: Pre-configured logging formatter.
        max_bytes: Rollover threshold in bytes.
        backup_count: Number of archived files to keep.

    Returns:
        Optional[RotatingFileHandler]: Configured handler or None if I/O fails.
    """
    try:
        ensure_parent_dir(log_file)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
        fh.setLevel(level_int)
        fh.setFormatter(formatter)
        _tag_handler(fh)
        return fh
    except OSError as e:
        sys.stderr.write(f"WARNING: Log sink unavailable at '{log_file}': {e}\n")
        return None
