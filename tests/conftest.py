from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A Logger factory that guarantees every instance is closed after a test.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Iterator, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    """Active log file location inside a not-yet-existing directory."""
    return tmp_path / "logs" / "app.log"


@pytest.fixture
def make_logger(log_path: Path) -> Iterator[Callable[..., Any]]:
    """
    Build Logger instances with console echo off by default.

    Every logger created through the factory is closed on teardown so
    background workers and sink listeners never leak between tests.
    """
    from logkeeper import Logger

    created: List[Any] = []

    def _factory(**options: Any) -> Any:
        options.setdefault("log_file", str(log_path))
        options.setdefault("enable_console_logging", False)
        lg = Logger(**options)
        created.append(lg)
        return lg

    yield _factory

    for lg in created:
        lg.close()
