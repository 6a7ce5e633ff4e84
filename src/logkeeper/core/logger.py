from __future__ import annotations

"""
Logger Orchestrator.

Owns one active NDJSON log file and the bookkeeping around it: a console
and size-rotated text sink, retention of same-prefix files, and optional
gzip compression after each append.

Threading model:
- Appends and reads run on the caller's thread.
- Retention and compression run on a single background worker, so they
  execute one at a time in submission order.
- Appends and compression share a lock: a record is never written into a
  file that is being compressed and removed.

Maintenance reports (deleted files, failures) go through this same logger.
To keep that bounded, they never schedule another compression cycle and
append failures are only echoed to the sink pipeline.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from typing import Any, Dict, List, Mapping, Optional, Set

from logkeeper.core.services.compression import (
    CompressionResult,
    archive_path_for,
    compress_log_file,
)
from logkeeper.core.services.reader import read_archive_records, read_log_records
from logkeeper.core.services.retention import RetentionResult, cleanup_old_log_files
from logkeeper.domain.config import LoggerConfig, config_from_mapping
from logkeeper.domain.records import LogRecord, create_record
from logkeeper.infra.fs import ensure_parent_dir, touch_file, truncate_file
from logkeeper.infra.logging import (
    METADATA_ATTR,
    RECORD_LEVELS,
    build_sink_pipeline,
    shutdown_sink_pipeline,
)

logger = logging.getLogger(__name__)


class Logger:
    """
    Application logger persisting records as NDJSON.

    Construction has side effects: the sink pipeline starts, the log
    directory is created, the active file is truncated (unless disabled)
    and a retention pass is queued in the background.
    """

    def __init__(self, config: Optional[LoggerConfig] = None, **options: Any) -> None:
        """
        Initialize the logger.

        Args:
            config: Explicit configuration. When omitted, keyword options are
                used instead (camelCase or snake_case names).
            **options: Loose options such as logFile=..., maxFiles=3.
        """
        self.config: LoggerConfig = config or config_from_mapping(options)
        self.log_file: str = self.config.resolved_log_file
        self.text_log_file: str = self.config.resolved_text_log_file

        self._file_lock = threading.RLock()
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="logkeeper")
        self._closed = False

        self._sink = build_sink_pipeline(
            self.config.log_level,
            console=self.config.enable_console_logging,
            text_log_file=self.text_log_file,
            max_bytes=self.config.max_size,
            backup_count=self.config.max_files,
        )
        self._create_log_file()
        self.startup_cleanup: Future = self.cleanup_old_log_files()

    # -------------------------------------------------------------------------
    # Context management
    # -------------------------------------------------------------------------

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Public API: emission
    # -------------------------------------------------------------------------

    def log(self, message: str, metadata: Optional[Mapping[str, Any]] = None) -> None:
        """Emit an info-level record."""
        self._emit("info", message, metadata)

    info = log

    def warn(self, message: str, metadata: Optional[Mapping[str, Any]] = None) -> None:
        """Emit a warn-level record."""
        self._emit("warn", message, metadata)

    def error(
            self,
            message: str,
            error: Any = None,
            metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Emit an error-level record.

        Args:
            message: Human-readable description.
            error: Error value stored under the reserved 'error' key.
            metadata: Extra fields; a caller-supplied 'error' key wins.
        """
        self._emit("error", message, _merge_error(error, metadata))

    # -------------------------------------------------------------------------
    # Public API: retrieval
    # -------------------------------------------------------------------------

    def get_logs(self, level: Optional[str] = None, include_archive: bool = False) -> List[LogRecord]:
        """
        Load persisted records from the active file.

        Args:
            level: Keep only records with this level.
            include_archive: Prepend records stored in '<log_file>.gz'.

        Returns:
            List[LogRecord]: Records in file order.

        Raises:
            OSError: If the active file cannot be read.
            ValueError: If any line is not a valid JSON object.
        """
        with self._file_lock:
            records = read_log_records(self.log_file, level)
            if include_archive:
                records = read_archive_records(archive_path_for(self.log_file), level) + records
        return records

    # -------------------------------------------------------------------------
    # Public API: maintenance
    # -------------------------------------------------------------------------

    def cleanup_old_log_files(self) -> Future:
        """Queue a retention pass. Returns the background future."""
        return self._submit(self._run_cleanup)

    def compress_log_file(self) -> Future:
        """Queue a compression cycle. Returns the background future."""
        return self._submit(self._run_compression)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until all queued background work has settled.

        Work queued while waiting is waited for as well.

        Args:
            timeout: Maximum seconds to wait per round, None for no limit.

        Returns:
            bool: True if nothing is left pending.
        """
        while True:
            with self._pending_lock:
                pending = {f for f in self._pending if not f.done()}
            if not pending:
                return True
            _, not_done = wait_futures(pending, timeout=timeout)
            if not_done:
                return False

    def close(self) -> None:
        """Drain background work and release the sink pipeline. Idempotent."""
        if self._closed:
            return
        self.wait()
        self._closed = True
        self._executor.shutdown(wait=True)
        shutdown_sink_pipeline(self._sink)
        logger.debug(f"Logger for {self.log_file} closed")

    # -------------------------------------------------------------------------
    # Internal: initialization
    # -------------------------------------------------------------------------

    def _create_log_file(self) -> None:
        ensure_parent_dir(self.log_file)
        if self.config.truncate_on_start:
            truncate_file(self.log_file)
        else:
            touch_file(self.log_file)

    # -------------------------------------------------------------------------
    # Internal: emission
    # -------------------------------------------------------------------------

    def _emit(
            self,
            level: str,
            message: str,
            metadata: Optional[Mapping[str, Any]],
            *,
            persist: bool = True,
            maintenance: bool = False,
    ) -> None:
        self._forward(level, message, metadata)

        if not (persist and self.config.persist_logs):
            return

        if self._write_to_log_file(create_record(level, message, metadata)):
            if self.config.compress_logs and not maintenance and not self._closed:
                self.compress_log_file()

    def _forward(self, level: str, message: str, metadata: Optional[Mapping[str, Any]]) -> None:
        extra = {METADATA_ATTR: dict(metadata) if metadata else None}
        self._sink.logger.log(RECORD_LEVELS.get(level, logging.INFO), message, extra=extra)

    def _write_to_log_file(self, record: LogRecord) -> bool:
        try:
            line = record.to_json_line()
        except (TypeError, ValueError) as e:
            self._forward("error", f"Error serializing log record '{record.message}': {e}", None)
            return False

        try:
            with self._file_lock:
                with open(self.log_file, "a", encoding="utf-8") as f:
                    f.write(line)
            return True
        except OSError as e:
            # Echo only; persisting would fail against the same file again
            self._forward("error", f"Error writing to log file '{self.log_file}': {e}", None)
            return False

    # -------------------------------------------------------------------------
    # Internal: background maintenance
    # -------------------------------------------------------------------------

    def _submit(self, fn) -> Future:
        if self._closed:
            raise RuntimeError("Logger is closed")
        future = self._executor.submit(fn)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)
        return future

    def _discard_pending(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _run_cleanup(self) -> RetentionResult:
        result = cleanup_old_log_files(self.log_file, self.config.max_files, self.config.retention_order)

        if result.scan_error:
            self._report_failure(f"Error cleaning up log files: {result.scan_error}")
            return result

        for path in result.deleted:
            self._report_success(f"Deleted log file '{path}'")
        for path, err in result.failed:
            self._report_failure(f"Error deleting log file '{path}': {err}")
        return result

    def _run_compression(self) -> Optional[CompressionResult]:
        try:
            with self._file_lock:
                result = compress_log_file(self.log_file)
        except OSError as e:
            self._report_failure(f"Error compressing log file '{self.log_file}': {e}")
            return None

        if result is None:
            return None
        if result.removed:
            self._report_success(f"Deleted log file '{result.source}'")
        else:
            self._report_failure(f"Error deleting log file '{result.source}': {result.remove_error}")
        return result

    def _report_success(self, message: str) -> None:
        # Persisting would recreate the active file right after a compression cycle
        self._emit("info", message, None, persist=False, maintenance=True)

    def _report_failure(self, message: str) -> None:
        self._emit("error", message, None, maintenance=True)


def _merge_error(error: Any, metadata: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Combine an error value and metadata under the reserved 'error' key."""
    merged: Dict[str, Any] = {}
    if error is not None:
        merged["error"] = error
    if metadata:
        merged.update(metadata)
    return merged
