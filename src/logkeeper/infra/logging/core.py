from __future__ import annotations

"""
Logging Core Orchestrator.

Two responsibilities live here:

1. The idempotent lifecycle of the package's own diagnostic logging
   (root logger), configured only by entrypoints such as the CLI.
2. The per-instance sink pipeline of a Logger: console echo plus a
   size-rotated text file, fed through a QueueHandler/QueueListener pair
   so that handler I/O never blocks the caller.
"""

import atexit
import itertools
import logging
import queue
import sys
import threading
from dataclasses import dataclass, field
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from logkeeper.infra.logging.config import LoggingConfig, parse_level
from logkeeper.infra.logging.handlers import (
    SinkFormatter,
    _create_rotating_file_handler,
    _create_stream_handler,
    _is_our_handler,
    _tag_handler,
)

# Internal state flags for idempotency and lifecycle tracking
_CONFIGURED_FLAG_ATTR: str = "_logkeeper_configured"
_QUEUE_LISTENER_ATTR: str = "_logkeeper_queue_listener"

SINK_LOGGER_PREFIX: str = "logkeeper.sink"

_sink_ids = itertools.count(1)
_live_pipelines: List["SinkPipeline"] = []
_live_lock = threading.Lock()


@dataclass(eq=False)
class SinkPipeline:
    """
    Handle on a running sink pipeline.

    Attributes:
        logger: Non-propagating logger that feeds the queue.
        listener: Background listener dispatching to the real handlers.
        handlers: Console and/or rotating file handlers owned by the pipeline.
        closed: Set once the pipeline has been shut down.
    """
    logger: logging.Logger
    listener: Optional[QueueListener]
    handlers: List[logging.Handler] = field(default_factory=list)
    closed: bool = False


# ==============================================================================
# PUBLIC API: DIAGNOSTIC LOGGING
# ==============================================================================

def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Execute idempotent configuration of the root logger using non-blocking I/O.

    Args:
        cfg: Structural configuration for diagnostic logging.
        force: If True, bypass idempotency checks and re-initialize handlers.

    Returns:
        logging.Logger: The initialized root logger instance.
    """
    root = logging.getLogger()

    already_configured = bool(getattr(root, _CONFIGURED_FLAG_ATTR, False))
    if already_configured and not force:
        return root

    level_int = parse_level(cfg.level)
    root.setLevel(level_int)

    # Cleanup existing infrastructure to prevent handler leakage
    _remove_our_handlers(root)
    _stop_existing_listener(root)

    handlers_list: List[logging.Handler] = []

    if cfg.console:
        handlers_list.append(
            _create_stream_handler(level_int, logging.Formatter(cfg.console_fmt), sys.stderr)
        )

    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh:
            handlers_list.append(fh)

    if not handlers_list:
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()
    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)

    # Flush pending diagnostics on interpreter shutdown
    atexit.register(_safe_stop_listener, listener)

    return root


def get_logger(name: str) -> logging.Logger:
    """
    Acquire a named logger instance compliant with the global configuration.

    Args:
        name: Hierarchical name for the logger (usually __name__).

    Returns:
        logging.Logger: The requested logger instance.
    """
    return logging.getLogger(name)


# ==============================================================================
# PUBLIC API: SINK PIPELINE
# ==============================================================================

def build_sink_pipeline(
        level: str,
        *,
        console: bool,
        text_log_file: Optional[str],
        max_bytes: int,
        backup_count: int,
) -> SinkPipeline:
    """
    Create the formatter -> console/text-file pipeline for one Logger.

    The returned logger never propagates to the root logger, so sink output
    stays separate from the package's diagnostics.

    Args:
        level: Minimum severity name ('info', 'warn', 'error', ...).
        console: Attach a stdout handler.
        text_log_file: Path of the size-rotated text sink, or None.
        max_bytes: Rollover threshold of the text sink.
        backup_count: Number of rotated text files to keep.

    Returns:
        SinkPipeline: The running pipeline.
    """
    level_int = parse_level(level)
    formatter = SinkFormatter()

    sink_logger = logging.getLogger(f"{SINK_LOGGER_PREFIX}.{next(_sink_ids)}")
    sink_logger.setLevel(level_int)
    sink_logger.propagate = False

    handlers_list: List[logging.Handler] = []
    if console:
        handlers_list.append(_create_stream_handler(level_int, formatter))

    if text_log_file:
        fh = _create_rotating_file_handler(
            text_log_file, level_int, formatter, max_bytes, backup_count
        )
        if fh:
            handlers_list.append(fh)

    if not handlers_list:
        sink_logger.addHandler(logging.NullHandler())
        return SinkPipeline(logger=sink_logger, listener=None)

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)
    sink_logger.addHandler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()

    pipeline = SinkPipeline(logger=sink_logger, listener=listener, handlers=handlers_list)
    with _live_lock:
        _live_pipelines.append(pipeline)
    return pipeline


def shutdown_sink_pipeline(pipeline: SinkPipeline) -> None:
    """
    Drain and release a sink pipeline. Safe to call more than once.

    Args:
        pipeline: Pipeline returned by build_sink_pipeline().
    """
    if pipeline.closed:
        return
    pipeline.closed = True

    _safe_stop_listener(pipeline.listener)
    with _live_lock:
        if pipeline in _live_pipelines:
            _live_pipelines.remove(pipeline)

    for h in list(pipeline.logger.handlers):
        pipeline.logger.removeHandler(h)
        h.close()
    for h in pipeline.handlers:
        h.close()


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _remove_our_handlers(root: logging.Logger) -> None:
    """Identify and detach all internally-managed handlers from the root."""
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    """Terminate and release the existing QueueListener to reset state."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _shutdown_live_pipelines() -> None:
    """Flush every sink pipeline still running at interpreter exit."""
    with _live_lock:
        pending = list(_live_pipelines)
    for pipeline in pending:
        shutdown_sink_pipeline(pipeline)


atexit.register(_shutdown_live_pipelines)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating double-stop calls.

    QueueListener.stop() flushes every queued record before joining.
    """
    if not listener:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
