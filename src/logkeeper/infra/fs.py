from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path resolution, directory preparation and directory scanning
utilities used by the logger. Acts as a thin abstraction over the 'os'
module so services can be tested against temporary directories.
"""

import os
from typing import List, Optional, Tuple

from logkeeper.domain.constants import DEFAULT_LOG_DIR_NAME, DEFAULT_LOG_FILE_NAME

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_default_log_path(base_dir: Optional[str] = None) -> str:
    """
    Resolve the default active log file location.

    Args:
        base_dir: Application root. Defaults to the current working directory.

    Returns:
        str: Absolute path to '<base_dir>/logs/app.log'.
    """
    root = base_dir or os.getcwd()
    return os.path.abspath(os.path.join(root, DEFAULT_LOG_DIR_NAME, DEFAULT_LOG_FILE_NAME))


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is blank.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))

# -----------------------------------------------------------------------------
# FILESYSTEM OPERATIONS API
# -----------------------------------------------------------------------------

def ensure_parent_dir(path: str) -> str:
    """
    Create the parent directory hierarchy for a target file.

    Args:
        path: Path of the file whose directory must exist.

    Returns:
        str: The parent directory.
    """
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)
    return parent


def truncate_file(path: str) -> None:
    """Create the file, or empty it if it already exists."""
    with open(path, "w", encoding="utf-8"):
        pass


def touch_file(path: str) -> None:
    """Create the file if missing, leaving existing content untouched."""
    with open(path, "a", encoding="utf-8"):
        pass


def list_prefixed_entries(directory: str, prefix: str) -> List[str]:
    """
    List directory entries whose name starts with a prefix.

    Order is whatever os.listdir() returns.

    Args:
        directory: Directory to scan.
        prefix: Required filename prefix.

    Returns:
        List[str]: Matching entry names (not full paths).

    Raises:
        OSError: If the directory cannot be listed.
    """
    return [name for name in os.listdir(directory) if name.startswith(prefix)]


def safe_remove(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to delete a file.

    Args:
        path: Target file path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.remove(path)
        return True, None
    except OSError as e:
        return False, str(e)
