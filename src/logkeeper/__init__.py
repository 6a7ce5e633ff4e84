from __future__ import annotations

from logkeeper.core.logger import Logger
from logkeeper.core.services.reader import read_archive_records, read_log_records
from logkeeper.domain.config import LoggerConfig, config_from_mapping, load_config_file
from logkeeper.domain.records import LogRecord

__version__ = "1.0.0"

__all__ = [
    "Logger",
    "LoggerConfig",
    "LogRecord",
    "config_from_mapping",
    "load_config_file",
    "read_log_records",
    "read_archive_records",
]
