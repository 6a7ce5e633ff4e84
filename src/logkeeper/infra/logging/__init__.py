from __future__ import annotations

from .config import LoggingConfig, RECORD_LEVELS, parse_level
from .core import (
    SinkPipeline,
    build_sink_pipeline,
    configure_logging,
    get_logger,
    shutdown_sink_pipeline,
)
from .handlers import METADATA_ATTR, SinkFormatter

__all__ = [
    "LoggingConfig",
    "RECORD_LEVELS",
    "parse_level",
    "SinkPipeline",
    "SinkFormatter",
    "METADATA_ATTR",
    "build_sink_pipeline",
    "configure_logging",
    "get_logger",
    "shutdown_sink_pipeline",
]
