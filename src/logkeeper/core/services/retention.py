from __future__ import annotations

"""
Log Retention Service.

Scans the log directory for entries sharing the active file's base name
and deletes the oldest ones until at most 'max_files' remain. The active
file itself matches the prefix and counts toward the total.

Two notions of "oldest" are supported:
- 'mtime': ascending modification time. On a tie the active file sorts
  last, then names decide.
- 'listing': raw os.listdir() order, whatever the platform returns.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from logkeeper.domain.constants import RETENTION_ORDER_LISTING
from logkeeper.infra.fs import list_prefixed_entries, safe_remove

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# RESULT MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RetentionResult:
    """
    Outcome of one retention pass.

    Attributes:
        scanned: Matching entries found, in the order used for selection.
        deleted: Absolute paths that were removed.
        failed: (path, error message) pairs for removals that failed.
        scan_error: Set when the directory could not be listed.
    """
    scanned: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    scan_error: Optional[str] = None


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def select_excess_files(entries: List[str], max_files: int) -> List[str]:
    """
    Pick the entries to delete from the oldest end of an ordered list.

    Args:
        entries: Entries ordered oldest first.
        max_files: How many entries may remain.

    Returns:
        List[str]: The leading entries beyond the allowance (may be empty).
    """
    if len(entries) <= max_files:
        return []
    return entries[:len(entries) - max(max_files, 0)]


def order_entries(
        directory: str,
        names: List[str],
        order: str,
        active: Optional[str] = None,
) -> List[str]:
    """
    Arrange entry names oldest first according to the retention order.

    Args:
        directory: Directory holding the entries.
        names: Entry names as returned by the directory listing.
        order: 'mtime' or 'listing'.
        active: Name of the active file; it loses mtime ties.

    Returns:
        List[str]: Names ordered oldest first.
    """
    if order == RETENTION_ORDER_LISTING:
        return list(names)

    def _mtime(name: str) -> Tuple[float, bool, str]:
        try:
            return os.path.getmtime(os.path.join(directory, name)), name == active, name
        except OSError:
            # Vanished entries sort first; their removal failure gets reported
            return 0.0, name == active, name

    return sorted(names, key=_mtime)


def cleanup_old_log_files(log_file: str, max_files: int, order: str) -> RetentionResult:
    """
    Delete same-prefix files beyond the retention allowance.

    Each deletion is attempted independently; a failure does not stop the
    remaining deletions.

    Args:
        log_file: Path of the active log file.
        max_files: Number of same-prefix entries to keep.
        order: 'mtime' or 'listing'.

    Returns:
        RetentionResult: What was scanned, deleted and what failed.
    """
    directory = os.path.dirname(os.path.abspath(log_file))
    prefix = os.path.basename(log_file)

    try:
        names = list_prefixed_entries(directory, prefix)
    except OSError as e:
        return RetentionResult(scan_error=str(e))

    ordered = order_entries(directory, names, order, active=prefix)
    excess = select_excess_files(ordered, max_files)
    logger.debug(
        f"Retention: {len(ordered)} entries match '{prefix}' in {directory}, "
        f"{len(excess)} over the limit of {max_files}"
    )

    deleted: List[str] = []
    failed: List[Tuple[str, str]] = []
    for name in excess:
        path = os.path.join(directory, name)
        ok, err = safe_remove(path)
        if ok:
            deleted.append(path)
        else:
            failed.append((path, err or "unknown error"))

    return RetentionResult(scanned=ordered, deleted=deleted, failed=failed)
