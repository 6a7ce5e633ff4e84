from __future__ import annotations

"""
Unit tests for the Log Retention Service.

Verifies prefix matching, both ordering strategies, the exact number of
survivors, and that one failed deletion does not block the others.
"""

import os
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

from logkeeper.core.services.retention import (
    cleanup_old_log_files,
    order_entries,
    select_excess_files,
)
from logkeeper.infra.fs import safe_remove


def _make_files(directory: Path, names: List[str]) -> None:
    for i, name in enumerate(names):
        path = directory / name
        path.write_text(name, encoding="utf-8")
        os.utime(path, (1_000_000 + i * 10, 1_000_000 + i * 10))


@pytest.mark.parametrize(
    "entries, max_files, expected",
    [
        (["a", "b", "c"], 5, []),
        (["a", "b", "c"], 3, []),
        (["a", "b", "c", "d"], 2, ["a", "b"]),
        (["a", "b"], 0, ["a", "b"]),
    ],
)
def test_select_excess_files(entries, max_files, expected) -> None:
    """Deletion candidates come from the front until max_files remain."""
    assert select_excess_files(entries, max_files) == expected


def test_listing_order_is_preserved_for_deletion(tmp_path: Path) -> None:
    """With 'listing' order the first entries as listed are removed."""
    _make_files(tmp_path, ["app.log", "app.log.1", "app.log.2", "app.log.3", "notes.txt"])
    listing = ["app.log.3", "app.log", "notes.txt", "app.log.1", "app.log.2"]

    with patch("logkeeper.infra.fs.os.listdir", return_value=listing):
        result = cleanup_old_log_files(str(tmp_path / "app.log"), 2, "listing")

    assert result.scanned == ["app.log.3", "app.log", "app.log.1", "app.log.2"]
    assert result.deleted == [str(tmp_path / "app.log.3"), str(tmp_path / "app.log")]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["app.log.1", "app.log.2", "notes.txt"]


def test_mtime_order_deletes_oldest(tmp_path: Path) -> None:
    """With 'mtime' order the least recently modified entries are removed."""
    _make_files(tmp_path, ["app.log.b", "app.log.c", "app.log.a", "app.log"])

    result = cleanup_old_log_files(str(tmp_path / "app.log"), 2, "mtime")

    assert [os.path.basename(p) for p in result.deleted] == ["app.log.b", "app.log.c"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["app.log", "app.log.a"]


def test_under_limit_deletes_nothing(tmp_path: Path) -> None:
    """Counts at or under the limit leave the directory untouched."""
    _make_files(tmp_path, ["app.log", "app.log.1"])

    result = cleanup_old_log_files(str(tmp_path / "app.log"), 2, "mtime")

    assert result.deleted == []
    assert len(list(tmp_path.iterdir())) == 2


def test_prefix_uses_active_file_base_name(tmp_path: Path) -> None:
    """Only names starting with the active file's base name are counted."""
    _make_files(tmp_path, ["service.log.1", "service.log.2", "app.log.1", "app.log.2"])

    result = cleanup_old_log_files(str(tmp_path / "service.log"), 1, "mtime")

    assert [os.path.basename(p) for p in result.deleted] == ["service.log.1"]
    assert (tmp_path / "app.log.1").exists()
    assert (tmp_path / "app.log.2").exists()


def test_deletion_failure_does_not_block_others(tmp_path: Path) -> None:
    """A failed removal is recorded while the remaining removals proceed."""
    _make_files(tmp_path, ["app.log.1", "app.log.2", "app.log.3", "app.log"])
    blocked = str(tmp_path / "app.log.1")

    def _flaky_remove(path: str):
        if path == blocked:
            return False, "permission denied"
        return safe_remove(path)

    with patch("logkeeper.core.services.retention.safe_remove", side_effect=_flaky_remove):
        result = cleanup_old_log_files(str(tmp_path / "app.log"), 1, "mtime")

    assert result.failed == [(blocked, "permission denied")]
    assert [os.path.basename(p) for p in result.deleted] == ["app.log.2", "app.log.3"]


def test_missing_directory_reports_scan_error(tmp_path: Path) -> None:
    """A directory that cannot be listed yields a scan error, not an exception."""
    result = cleanup_old_log_files(str(tmp_path / "missing" / "app.log"), 1, "mtime")

    assert result.scan_error
    assert result.deleted == []


def test_order_entries_mtime_tolerates_vanished_files(tmp_path: Path) -> None:
    """Entries that disappear before stat() sort first."""
    _make_files(tmp_path, ["app.log.1"])

    ordered = order_entries(str(tmp_path), ["app.log.1", "app.log.ghost"], "mtime")

    assert ordered == ["app.log.ghost", "app.log.1"]


def test_active_file_wins_mtime_ties(tmp_path: Path) -> None:
    """The active file and its text sink can share a timestamp; the active file survives."""
    for name in ("app.log", "app.log.txt"):
        path = tmp_path / name
        path.write_text("", encoding="utf-8")
        os.utime(path, (1_000_000, 1_000_000))

    result = cleanup_old_log_files(str(tmp_path / "app.log"), 1, "mtime")

    assert [os.path.basename(p) for p in result.deleted] == ["app.log.txt"]
    assert (tmp_path / "app.log").exists()
