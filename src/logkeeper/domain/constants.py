from __future__ import annotations

"""
Domain Constants.

Centralizes default option values, supported severity levels, and the
mapping between public option names and configuration attributes.
"""

from typing import Dict, Tuple

DEFAULT_LOG_LEVEL = "info"
DEFAULT_LOG_DIR_NAME = "logs"
DEFAULT_LOG_FILE_NAME = "app.log"
DEFAULT_MAX_SIZE = 5 * 1024 * 1024  # 5MB
DEFAULT_MAX_FILES = 5

ARCHIVE_SUFFIX = ".gz"
TEXT_SINK_SUFFIX = ".txt"

# Severities that may appear in a persisted record
LEVELS: Tuple[str, ...] = ("info", "warn", "error")

RETENTION_ORDER_MTIME = "mtime"
RETENTION_ORDER_LISTING = "listing"
RETENTION_ORDERS: Tuple[str, ...] = (RETENTION_ORDER_MTIME, RETENTION_ORDER_LISTING)

# Console/text sink line layout
SINK_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Public (camelCase) option names accepted alongside attribute names
OPTION_ALIASES: Dict[str, str] = {
    "logLevel": "log_level",
    "logFile": "log_file",
    "maxSize": "max_size",
    "maxFiles": "max_files",
    "enableConsoleLogging": "enable_console_logging",
    "compressLogs": "compress_logs",
    "persistLogs": "persist_logs",
    "textLogFile": "text_log_file",
    "retentionOrder": "retention_order",
    "truncateOnStart": "truncate_on_start",
}
