from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: bootstrap of diagnostic logging, merging
of configuration sources (defaults, JSON config file, CLI overrides),
dispatch to the selected subcommand and result rendering.
"""

import json
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

from logkeeper.core.logger import Logger
from logkeeper.core.services.compression import archive_path_for
from logkeeper.core.services.reader import read_archive_records, read_log_records
from logkeeper.domain.config import LoggerConfig, config_from_mapping, load_config_file
from logkeeper.domain.constants import OPTION_ALIASES
from logkeeper.domain.records import LogRecord
from logkeeper.infra.logging import LoggingConfig, configure_logging, get_logger
from logkeeper.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 usage/input error).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Diagnostic logging bootstrap (stderr only)
    log_level = "DEBUG" if args.debug else "WARNING"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=None))

    # 3. Resolve configuration hierarchy
    base: Dict[str, Any] = {}
    if args.config_file:
        base = load_config_file(args.config_file)
    config = config_from_mapping(_merge_options(base, cli_args.args_to_overrides(args)))
    logger.debug(f"Resolved logger configuration: {config}")

    # 4. Dispatch
    handlers = {
        "write": _cmd_write,
        "show": _cmd_show,
        "cleanup": _cmd_cleanup,
        "compress": _cmd_compress,
    }
    try:
        return handlers[args.command](args, config)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130

# -----------------------------------------------------------------------------
# SUBCOMMANDS
# -----------------------------------------------------------------------------

def _cmd_write(args, config: LoggerConfig) -> int:
    """Append one record without truncating existing content."""
    metadata: Optional[Dict[str, Any]] = None
    if args.metadata:
        try:
            metadata = json.loads(args.metadata)
        except json.JSONDecodeError as e:
            print(f"ERROR: --meta is not valid JSON: {e}", file=sys.stderr)
            return EXIT_USAGE
        if not isinstance(metadata, dict):
            print("ERROR: --meta must be a JSON object.", file=sys.stderr)
            return EXIT_USAGE

    with Logger(replace(config, truncate_on_start=False)) as lg:
        if args.level == "error":
            lg.error(args.message, metadata=metadata)
        elif args.level == "warn":
            lg.warn(args.message, metadata)
        else:
            lg.log(args.message, metadata)
    return EXIT_OK


def _cmd_show(args, config: LoggerConfig) -> int:
    """Print persisted records without touching the log files."""
    log_file = config.resolved_log_file
    records: List[LogRecord] = []

    try:
        if args.archive:
            records.extend(read_archive_records(archive_path_for(log_file), args.level))
            # After a compression cycle the active file may legitimately be absent
            try:
                records.extend(read_log_records(log_file, args.level))
            except FileNotFoundError:
                pass
        else:
            records = read_log_records(log_file, args.level)
    except FileNotFoundError:
        print(f"ERROR: Log file not found: {log_file}", file=sys.stderr)
        return EXIT_USAGE
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read logs from {log_file}: {e}")
        print(f"ERROR: Cannot read logs from {log_file}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    for record in records:
        if args.json_output:
            sys.stdout.write(record.to_json_line())
        else:
            print(_render_record(record))
    return EXIT_OK


def _cmd_cleanup(args, config: LoggerConfig) -> int:
    """Run one retention pass and report what was removed."""
    with Logger(replace(config, truncate_on_start=False)) as lg:
        result = lg.startup_cleanup.result()

    if result.scan_error:
        print(f"ERROR: Cannot scan log directory: {result.scan_error}", file=sys.stderr)
        return EXIT_FAILURE

    print(f"Kept {len(result.scanned) - len(result.deleted)} file(s), deleted {len(result.deleted)}.")
    for path in result.deleted:
        print(f"  - {path}")
    for path, err in result.failed:
        print(f"ERROR: Could not delete {path}: {err}", file=sys.stderr)
    return EXIT_FAILURE if result.failed else EXIT_OK


def _cmd_compress(args, config: LoggerConfig) -> int:
    """Run one compression cycle on the active file."""
    with Logger(replace(config, truncate_on_start=False)) as lg:
        result = lg.compress_log_file().result()

    if result is None:
        print("ERROR: Compression failed; see the error record for details.", file=sys.stderr)
        return EXIT_FAILURE
    if not result.removed:
        print(f"ERROR: Compressed but could not delete {result.source}: {result.remove_error}", file=sys.stderr)
        return EXIT_FAILURE

    print(f"Compressed {result.bytes_in} bytes into {result.archive}")
    return EXIT_OK

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _merge_options(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Layer CLI overrides on top of file options.

    Both camelCase and snake_case names may appear in the file, so the
    camelCase twin of an overridden key is dropped before merging.
    """
    out = dict(base)
    for alias, name in OPTION_ALIASES.items():
        if name in overrides:
            out.pop(alias, None)
    out.update(overrides)
    return out


def _render_record(record: LogRecord) -> str:
    """Format a record as '<timestamp> [<LEVEL>] <message> <metadata>'."""
    meta = ""
    if record.metadata:
        meta = " " + json.dumps(record.metadata, ensure_ascii=False)
    return f"{record.timestamp} [{str(record.level).upper()}] {record.message}{meta}"


if __name__ == "__main__":
    sys.exit(main())
