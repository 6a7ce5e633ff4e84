from __future__ import annotations

"""
Log Compression Service.

Gzips the active log file into '<path>.gz' and removes the original only
once the compressed output has been fully written and closed. Every cycle
appends a new gzip member, so earlier archived records survive and the
archive still decompresses as one stream.
"""

import gzip
import logging
import os
import shutil
from dataclasses import dataclass
from typing import Optional

from logkeeper.domain.constants import ARCHIVE_SUFFIX
from logkeeper.infra.fs import safe_remove

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class CompressionResult:
    """
    Outcome of one compression cycle.

    Attributes:
        source: The active file that was compressed.
        archive: The gzip archive written to.
        bytes_in: Uncompressed bytes consumed.
        removed: Whether the source was deleted afterwards.
        remove_error: Error message if the deletion failed.
    """
    source: str
    archive: str
    bytes_in: int
    removed: bool
    remove_error: Optional[str] = None


def archive_path_for(log_file: str) -> str:
    """Return the archive location for an active log file."""
    return f"{log_file}{ARCHIVE_SUFFIX}"


def compress_log_file(log_file: str) -> Optional[CompressionResult]:
    """
    Run one compress-and-remove cycle on the active log file.

    Args:
        log_file: Path of the active log file.

    Returns:
        Optional[CompressionResult]: None when there is no file to compress.

    Raises:
        OSError: If reading the source or writing the archive fails. The
            source is left in place in that case.
    """
    if not os.path.exists(log_file):
        logger.debug(f"Compression skipped, nothing at {log_file}")
        return None

    archive = archive_path_for(log_file)
    with open(log_file, "rb") as f_in, gzip.open(archive, "ab") as f_out:
        shutil.copyfileobj(f_in, f_out, _CHUNK_SIZE)
        bytes_in = f_in.tell()

    # Both streams are closed here, so the archive is complete on disk
    removed, err = safe_remove(log_file)
    logger.debug(f"Compressed {bytes_in} bytes from {log_file} into {archive}")
    return CompressionResult(
        source=log_file,
        archive=archive,
        bytes_in=bytes_in,
        removed=removed,
        remove_error=err,
    )
