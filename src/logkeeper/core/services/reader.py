from __future__ import annotations

"""
Log Retrieval Service.

Loads persisted NDJSON records back into memory. Reading is all-or-nothing:
a single malformed line fails the whole call.
"""

import gzip
import os
from typing import IO, List, Optional

from logkeeper.domain.records import LogRecord, parse_record_line


def read_log_records(log_file: str, level: Optional[str] = None) -> List[LogRecord]:
    """
    Read every record of the active log file, in file order.

    Args:
        log_file: Path of the active NDJSON file.
        level: If given, keep only records with this exact level.

    Returns:
        List[LogRecord]: The decoded records.

    Raises:
        OSError: If the file cannot be read (FileNotFoundError when missing).
        ValueError: If any non-empty line is not a JSON object.
    """
    with open(log_file, "r", encoding="utf-8") as f:
        records = _parse_stream(f)
    return filter_by_level(records, level)


def read_archive_records(archive_file: str, level: Optional[str] = None) -> List[LogRecord]:
    """
    Read records from a gzip archive, concatenated members included.

    A missing archive yields an empty list.

    Args:
        archive_file: Path of the '.gz' archive.
        level: If given, keep only records with this exact level.

    Returns:
        List[LogRecord]: The decoded records, oldest member first.
    """
    if not os.path.exists(archive_file):
        return []
    with gzip.open(archive_file, "rt", encoding="utf-8") as f:
        records = _parse_stream(f)
    return filter_by_level(records, level)


def filter_by_level(records: List[LogRecord], level: Optional[str]) -> List[LogRecord]:
    """Keep records matching the level, preserving order. No level keeps all."""
    if not level:
        return records
    return [r for r in records if r.level == level]


def _parse_stream(stream: IO[str]) -> List[LogRecord]:
    """Decode every non-empty line of a text stream."""
    content = stream.read()
    return [parse_record_line(line) for line in content.split("\n") if line != ""]
