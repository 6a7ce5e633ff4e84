from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema (global logger options plus the write,
show, cleanup and compress subcommands) and translates the parsed
namespace into logger configuration overrides.
"""

import argparse
from typing import Any, Dict

from logkeeper.domain.constants import LEVELS, RETENTION_ORDERS

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the logkeeper CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="logkeeper",
        description="Write, inspect and maintain NDJSON application logs.",
    )

    # --- Configuration Sources ---
    p.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help="JSON file with logger options (logFile, maxSize, maxFiles, ...).",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Active log file path (default: ./logs/app.log).",
    )

    # --- Rotation and Retention ---
    p.add_argument(
        "--max-size",
        dest="max_size",
        type=int,
        default=None,
        help="Rollover threshold in bytes for the text sink.",
    )
    p.add_argument(
        "--max-files",
        dest="max_files",
        type=int,
        default=None,
        help="Number of same-prefix files to keep.",
    )
    p.add_argument(
        "--retention-order",
        dest="retention_order",
        choices=RETENTION_ORDERS,
        default=None,
        help="How the oldest files are chosen for deletion.",
    )

    # --- Output Behaviour ---
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Do not echo records to stdout.",
    )
    p.add_argument(
        "--compress",
        action="store_true",
        help="Gzip the active file after every write.",
    )
    p.add_argument(
        "--no-persist",
        action="store_true",
        help="Skip appending records to the active file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate diagnostic verbosity to DEBUG.",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- write ---
    w = sub.add_parser("write", help="Append one record to the active log file.")
    w.add_argument("level", choices=LEVELS, help="Record severity.")
    w.add_argument("message", help="Record message.")
    w.add_argument(
        "--meta",
        dest="metadata",
        default=None,
        help="Metadata as a JSON object, e.g. '{\"user\": 42}'.",
    )

    # --- show ---
    s = sub.add_parser("show", help="Print persisted records.")
    s.add_argument("--level", choices=LEVELS, default=None, help="Only show this level.")
    s.add_argument(
        "--archive",
        action="store_true",
        help="Include records from the gzip archive.",
    )
    s.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print records as NDJSON instead of text lines.",
    )

    # --- maintenance ---
    sub.add_parser("cleanup", help="Delete same-prefix files beyond --max-files.")
    sub.add_parser("compress", help="Gzip the active file into '<file>.gz'.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Convert parsed arguments into logger configuration overrides.

    Only options explicitly given on the command line are returned, so
    values from a config file or the defaults stay in effect otherwise.

    Args:
        args: Parsed argparse namespace.

    Returns:
        Dict[str, Any]: Overrides keyed by LoggerConfig attribute name.
    """
    overrides: Dict[str, Any] = {}

    for key in ("log_file", "max_size", "max_files", "retention_order"):
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value

    if args.no_console:
        overrides["enable_console_logging"] = False
    if args.compress:
        overrides["compress_logs"] = True
    if args.no_persist:
        overrides["persist_logs"] = False

    return overrides
