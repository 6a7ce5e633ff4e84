from __future__ import annotations

"""
Unit tests for the Log Compression Service.
"""

import gzip
from pathlib import Path
from unittest.mock import patch

from logkeeper.core.services.compression import archive_path_for, compress_log_file


def test_compress_writes_archive_then_removes_source(tmp_path: Path) -> None:
    """The archive holds the original bytes and the source is deleted."""
    source = tmp_path / "app.log"
    source.write_text('{"message": "a"}\n', encoding="utf-8")

    result = compress_log_file(str(source))

    assert result is not None
    assert result.removed is True
    assert result.bytes_in == len('{"message": "a"}\n')
    assert not source.exists()
    with gzip.open(archive_path_for(str(source)), "rt", encoding="utf-8") as f:
        assert f.read() == '{"message": "a"}\n'


def test_compress_appends_new_member(tmp_path: Path) -> None:
    """Repeated cycles keep earlier content in the same archive."""
    source = tmp_path / "app.log"
    source.write_text("one\n", encoding="utf-8")
    compress_log_file(str(source))
    source.write_text("two\n", encoding="utf-8")
    compress_log_file(str(source))

    with gzip.open(f"{source}.gz", "rt", encoding="utf-8") as f:
        assert f.read() == "one\ntwo\n"


def test_compress_missing_source_is_noop(tmp_path: Path) -> None:
    """Nothing to compress yields None and no archive."""
    assert compress_log_file(str(tmp_path / "app.log")) is None
    assert not (tmp_path / "app.log.gz").exists()


def test_compress_reports_failed_removal(tmp_path: Path) -> None:
    """If the source cannot be deleted the archive is still complete."""
    source = tmp_path / "app.log"
    source.write_text("data\n", encoding="utf-8")

    with patch("logkeeper.core.services.compression.safe_remove", return_value=(False, "busy")):
        result = compress_log_file(str(source))

    assert result.removed is False
    assert result.remove_error == "busy"
    assert source.exists()
    with gzip.open(f"{source}.gz", "rt", encoding="utf-8") as f:
        assert f.read() == "data\n"
