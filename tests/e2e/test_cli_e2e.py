from __future__ import annotations

"""
End-to-End tests for the logkeeper CLI.

Drives the real entrypoint against temporary directories and checks
exit codes, printed output and the resulting files.
"""

import gzip
import json
import logging
import os
from logging.handlers import QueueListener
from pathlib import Path

import pytest

from logkeeper.infra.logging.core import _CONFIGURED_FLAG_ATTR, _QUEUE_LISTENER_ATTR
from logkeeper.infra.logging.handlers import _HANDLER_TAG_ATTR
from logkeeper.main import main


@pytest.fixture(autouse=True)
def reset_root_logging():
    """Detach diagnostic handlers the CLI installs on the root logger."""
    yield
    root = logging.getLogger()
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener and isinstance(listener, QueueListener):
        listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)
    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG_ATTR, False):
            root.removeHandler(h)
            h.close()
    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


@pytest.fixture
def cli_log(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "app.log"


def _run(cli_log: Path, *argv: str) -> int:
    return main(["--log-file", str(cli_log), "--no-console", *argv])


def test_write_then_show(cli_log: Path, capsys) -> None:
    """Records written in separate invocations accumulate and can be listed."""
    assert _run(cli_log, "write", "info", "first") == 0
    assert _run(cli_log, "write", "warn", "second", "--meta", '{"k": 1}') == 0
    capsys.readouterr()

    assert _run(cli_log, "show") == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 2
    assert "[INFO] first" in out[0]
    assert out[1].endswith('[WARN] second {"k": 1}')


def test_show_json_with_level_filter(cli_log: Path, capsys) -> None:
    """--json prints NDJSON records of the requested level only."""
    _run(cli_log, "write", "info", "a")
    _run(cli_log, "write", "error", "b")
    capsys.readouterr()

    assert _run(cli_log, "show", "--level", "error", "--json") == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["message"] == "b"


def test_show_missing_file(cli_log: Path, capsys) -> None:
    """Showing a log that does not exist is an input error."""
    assert _run(cli_log, "show") == 2
    assert "not found" in capsys.readouterr().err


def test_show_malformed_file(cli_log: Path, capsys) -> None:
    """A corrupted log file fails the show command."""
    cli_log.parent.mkdir(parents=True)
    cli_log.write_text("not json\n", encoding="utf-8")

    assert _run(cli_log, "show") == 1
    assert "Cannot read logs" in capsys.readouterr().err


def test_write_rejects_bad_metadata(cli_log: Path, capsys) -> None:
    """--meta must be a JSON object."""
    assert _run(cli_log, "write", "info", "x", "--meta", "[1]") == 2
    assert _run(cli_log, "write", "info", "x", "--meta", "{oops") == 2


def test_compress_and_show_archive(cli_log: Path, capsys) -> None:
    """compress moves records into the archive; show --archive still lists them."""
    _run(cli_log, "write", "info", "kept")

    assert _run(cli_log, "compress") == 0
    assert not cli_log.exists()
    assert Path(f"{cli_log}.gz").exists()
    capsys.readouterr()

    assert _run(cli_log, "show", "--archive") == 0
    assert "kept" in capsys.readouterr().out


def test_write_with_compress_flag(cli_log: Path) -> None:
    """--compress archives every written record."""
    assert _run(cli_log, "--compress", "write", "info", "zipped") == 0

    with gzip.open(f"{cli_log}.gz", "rt", encoding="utf-8") as f:
        assert json.loads(f.readline())["message"] == "zipped"


def test_cleanup_command(cli_log: Path, capsys) -> None:
    """cleanup keeps exactly --max-files same-prefix entries."""
    cli_log.parent.mkdir(parents=True)
    for i in range(4):
        old = cli_log.parent / f"app.log.{i}"
        old.write_text("x", encoding="utf-8")
        os.utime(old, (1_000_000 + i, 1_000_000 + i))

    assert _run(cli_log, "--max-files", "3", "cleanup") == 0
    out = capsys.readouterr().out
    assert "deleted 3" in out

    remaining = [p.name for p in cli_log.parent.iterdir() if p.name.startswith("app.log")]
    assert len(remaining) == 3


def test_config_file_is_applied(tmp_path: Path, cli_log: Path) -> None:
    """Options from --config are used when no flag overrides them."""
    config = tmp_path / "logger.json"
    config.write_text(json.dumps({"persistLogs": False, "logFile": "ignored.log"}), encoding="utf-8")

    assert main(["--config", str(config), "--log-file", str(cli_log), "--no-console",
                 "write", "info", "skip"]) == 0
    assert cli_log.read_text(encoding="utf-8") == ""
