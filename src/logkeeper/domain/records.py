from __future__ import annotations

"""
Log Record Domain Model.

Defines the persisted record shape and its NDJSON line codec. A record is
written once and never mutated; the on-disk field order is
level, message, timestamp, metadata.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

# -----------------------------------------------------------------------------
# CORE DATA MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LogRecord:
    """
    Single persisted log entry.

    Attributes:
        level: Severity ('info', 'warn' or 'error').
        message: Human-readable message.
        timestamp: ISO-8601 UTC instant, e.g. '2024-05-01T10:00:00.123Z'.
        metadata: Optional free-form mapping attached to the entry.
    """
    level: str
    message: str
    timestamp: str
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready representation, omitting absent metadata."""
        data: Dict[str, Any] = {
            "level": self.level,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data

    def to_json_line(self) -> str:
        """Encode the record as one NDJSON line, newline included."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=json_default) + "\n"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LogRecord":
        """Build a record from a decoded JSON object. Decoded values are kept as-is."""
        return cls(
            level=data.get("level", ""),
            message=data.get("message", ""),
            timestamp=data.get("timestamp", ""),
            metadata=data.get("metadata"),
        )

    @property
    def created_at(self) -> datetime:
        """Parsed timestamp as an aware datetime."""
        return parse_timestamp(self.timestamp)


# -----------------------------------------------------------------------------
# FACTORY & CODEC FUNCTIONS
# -----------------------------------------------------------------------------

def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    Render an instant as ISO-8601 UTC with millisecond precision.

    Args:
        now: Instant to render. Defaults to the current time.

    Returns:
        str: Timestamp ending in 'Z'.
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by utc_timestamp()."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def create_record(
        level: str,
        message: str,
        metadata: Optional[Mapping[str, Any]] = None,
) -> LogRecord:
    """Stamp a new record with the current time."""
    return LogRecord(
        level=level,
        message=str(message),
        timestamp=utc_timestamp(),
        metadata=dict(metadata) if metadata is not None else None,
    )


def parse_record_line(line: str) -> LogRecord:
    """
    Decode one NDJSON line into a LogRecord.

    Args:
        line: A single non-empty line of the active log file.

    Returns:
        LogRecord: The decoded record.

    Raises:
        json.JSONDecodeError: If the line is not valid JSON.
        ValueError: If the line decodes to something other than an object.
    """
    data = json.loads(line)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object per line, found {type(data).__name__}")
    return LogRecord.from_dict(data)


def json_default(value: Any) -> Any:
    """
    Serialize values the json module cannot encode natively.

    Exceptions become {'name', 'message'}; sets become lists; anything
    else falls back to its string form.
    """
    if isinstance(value, BaseException):
        return {"name": type(value).__name__, "message": str(value)}
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, datetime):
        return utc_timestamp(value)
    return str(value)
