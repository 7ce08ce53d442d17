"""Error logging for the libtoggle CLI with local analytics.

Logs failures to ~/.libtoggle/errors.jsonl so recurring problems (a group
that keeps colliding, a typo'd group name) show up in `libtoggle errors`.

Entry schema:
{
    "timestamp": "2026-03-02T10:42:00Z",
    "command": "libtoggle move-command stray.md demo",
    "subcommand": "move-command",
    "error_type": "COLLISION",
    "error_code": "COLLISION",
    "message": "stray.md already exists in demo",
    "context": {"kind": "command"}
}
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from libtoggle.errors import (
    AssetNotFoundError,
    CollisionError,
    ImportSourceError,
    InvalidNameError,
    NotAssetError,
    UnknownGroupError,
)


class ErrorType(Enum):
    """Error taxonomy for libtoggle CLI errors."""

    UNKNOWN_GROUP = "UNKNOWN_GROUP"
    NOT_FOUND = "NOT_FOUND"
    NOT_ASSET = "NOT_ASSET"
    COLLISION = "COLLISION"
    INVALID_NAME = "INVALID_NAME"
    IMPORT_FAILED = "IMPORT_FAILED"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


_ERROR_TYPES = {
    UnknownGroupError: ErrorType.UNKNOWN_GROUP,
    AssetNotFoundError: ErrorType.NOT_FOUND,
    NotAssetError: ErrorType.NOT_ASSET,
    CollisionError: ErrorType.COLLISION,
    InvalidNameError: ErrorType.INVALID_NAME,
    ImportSourceError: ErrorType.IMPORT_FAILED,
}


def classify_error(error: Exception) -> ErrorType:
    """Map an exception to its ErrorType."""
    for exc_type, error_type in _ERROR_TYPES.items():
        if isinstance(error, exc_type):
            return error_type
    return ErrorType.UNEXPECTED_ERROR


@dataclass
class ErrorEntry:
    """Represents a single error log entry."""

    timestamp: str
    command: str
    subcommand: str
    error_type: ErrorType
    message: str
    context: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "timestamp": self.timestamp,
            "command": self.command,
            "subcommand": self.subcommand,
            "error_type": self.error_type.value,
            "error_code": self.error_type.value,
            "message": self.message,
        }
        if self.context is not None:
            result["context"] = self.context
        return result


class ErrorLogger:
    """Logger for error telemetry to a JSONL file.

    Logs errors to ~/.libtoggle/errors.jsonl with automatic rotation.
    """

    DEFAULT_MAX_ENTRIES = 10000

    def __init__(
        self,
        error_file: Optional[Path] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        """Initialize error logger.

        Args:
            error_file: Path to errors.jsonl file. Defaults to ~/.libtoggle/errors.jsonl
            max_entries: Maximum entries to keep (older entries are removed)
        """
        if error_file is None:
            error_file = Path.home() / ".libtoggle" / "errors.jsonl"

        self.error_file = Path(error_file)
        self.max_entries = max_entries
        self.error_file.parent.mkdir(parents=True, exist_ok=True)

    def log_error(
        self,
        command: str,
        subcommand: str,
        error_type: ErrorType,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        """Append an error entry to the JSONL file.

        Args:
            command: Full command string (e.g., "libtoggle commands bmad on")
            subcommand: Subcommand name (e.g., "commands")
            error_type: ErrorType enum value
            message: Human-readable error message
            context: Optional context dict with error details
        """
        entry = ErrorEntry(
            timestamp=datetime.now().isoformat() + "Z",
            command=command,
            subcommand=subcommand,
            error_type=error_type,
            message=message,
            context=context,
        )

        with open(self.error_file, "a") as f:
            f.write(json.dumps(entry.to_dict()) + "\n")

        self._rotate_if_needed()

    def _rotate_if_needed(self) -> None:
        if not self.error_file.exists():
            return

        lines = self.error_file.read_text().strip().split("\n")
        if len(lines) > self.max_entries:
            keep_lines = lines[-self.max_entries:]
            self.error_file.write_text("\n".join(keep_lines) + "\n")

    def get_error_stats(self, days: int = 7, error_type: Optional[str] = None) -> dict[str, Any]:
        """Get aggregated error statistics.

        Args:
            days: Number of days to include in stats
            error_type: Only count entries of this type (e.g. "COLLISION")

        Returns:
            Dict with total, by_type, by_command and by_group aggregations.
            by_group keys look like "command/demo", taken from the logged context.
        """
        cutoff = datetime.now() - timedelta(days=days)
        entries = self._read_entries(cutoff=cutoff, error_type=error_type)

        stats: dict[str, Any] = {
            "total": len(entries),
            "by_type": {},
            "by_command": {},
            "by_group": {},
        }

        for entry in entries:
            error_type = entry.get("error_type", "UNKNOWN")
            stats["by_type"][error_type] = stats["by_type"].get(error_type, 0) + 1

            subcommand = entry.get("subcommand", "unknown")
            stats["by_command"][subcommand] = stats["by_command"].get(subcommand, 0) + 1

            context = entry.get("context") or {}
            if context.get("group"):
                key = f"{context.get('kind', '?')}/{context['group']}"
                stats["by_group"][key] = stats["by_group"].get(key, 0) + 1

        return stats

    def get_recent_errors(self, limit: int = 10, error_type: Optional[str] = None) -> list[dict[str, Any]]:
        """Get recent error entries, most recent first."""
        entries = self._read_entries(error_type=error_type)
        return list(reversed(entries[-limit:]))

    def _read_entries(
        self,
        cutoff: Optional[datetime] = None,
        error_type: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        if not self.error_file.exists():
            return []

        entries = []
        for line in self.error_file.read_text().strip().split("\n"):
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue

            if error_type and entry.get("error_type") != error_type:
                continue

            if cutoff:
                ts_str = entry.get("timestamp", "").rstrip("Z")
                if ts_str:
                    try:
                        if datetime.fromisoformat(ts_str) < cutoff:
                            continue
                    except ValueError:
                        continue

            entries.append(entry)

        return entries


# Module-level singleton and convenience functions
_default_logger: Optional[ErrorLogger] = None


def _get_default_logger() -> ErrorLogger:
    global _default_logger
    if _default_logger is None:
        _default_logger = ErrorLogger()
    return _default_logger


def log_error(
    command: str,
    subcommand: str,
    error_type: ErrorType,
    message: str,
    context: Optional[dict[str, Any]] = None,
) -> None:
    """Log an error using the default logger (~/.libtoggle/errors.jsonl)."""
    _get_default_logger().log_error(
        command=command,
        subcommand=subcommand,
        error_type=error_type,
        message=message,
        context=context,
    )


def reset_default_logger() -> None:
    """Reset the default logger (for testing)."""
    global _default_logger
    _default_logger = None
