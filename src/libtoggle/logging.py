"""Operation log for libtoggle with hybrid format.

Logs are written in hybrid format:
    YYYY-MM-DD HH:MM:SS LEVEL [operation] Human message | {"json": "data"}

Every enable, disable, move, register and import leaves one line, so
the history of what was linked where can be reconstructed later.
"""
import json
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional


class LibraryLogger:
    """Logger for library operations with hybrid format output.

    Logs are written to monthly files: libtoggle-YYYY-MM.log
    Default location: ~/.libtoggle/logs/
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """Initialize logger with log directory.

        Args:
            log_dir: Directory for log files. Defaults to ~/.libtoggle/logs/
        """
        if log_dir is None:
            log_dir = Path.home() / ".libtoggle" / "logs"

        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def _get_log_file(self) -> Path:
        month_str = datetime.now().strftime("%Y-%m")
        return self.log_dir / f"libtoggle-{month_str}.log"

    def _format_log_line(
        self,
        level: str,
        operation: str,
        message: str,
        data: Dict[str, Any]
    ) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level_padded = level.ljust(5)
        json_str = json.dumps(data, ensure_ascii=False, default=str)
        return f"{timestamp} {level_padded} [{operation}] {message} | {json_str}\n"

    def log_event(
        self,
        operation: str,
        message: str,
        data: Dict[str, Any],
        level: str = "INFO"
    ) -> None:
        """Log an event with hybrid format.

        Args:
            operation: Operation name (enable, disable, move, register, import)
            message: Human-readable message
            data: Structured data as dict
            level: Log level (DEBUG, INFO, WARNING, ERROR)
        """
        log_line = self._format_log_line(level, operation, message, data)

        with open(self._get_log_file(), "a") as f:
            f.write(log_line)

    def log_error(
        self,
        operation: str,
        message: str,
        data: Dict[str, Any]
    ) -> None:
        reason = data.get("reason", "")
        full_message = f"{message}: {reason}" if reason else message
        self.log_event(operation, full_message, data, level="ERROR")

    def get_log_files(self, months_back: int = 6) -> list[Path]:
        """Get list of available log files (most recent first)."""
        log_files = list(self.log_dir.glob("libtoggle-*.log"))
        # Filenames embed YYYY-MM, so a reverse sort is newest first
        return sorted(log_files, reverse=True)[:months_back]

    def read_logs(
        self,
        limit: int = 50,
        operation_filter: Optional[str] = None,
        level_filter: Optional[str] = None
    ) -> list[dict]:
        """Read and parse log entries, newest first, with optional filtering.

        Args:
            limit: Maximum number of entries to return
            operation_filter: Only return entries for this operation
            level_filter: Only return entries with this log level

        Returns:
            List of parsed entries (dicts with timestamp, level, operation, message, data)
        """
        entries = []

        for log_file in self.get_log_files():
            if not log_file.exists():
                continue

            with open(log_file, 'r') as f:
                lines = f.readlines()

            for line in reversed(lines):
                entry = self._parse_log_line(line)
                if not entry:
                    continue
                if operation_filter and entry['operation'] != operation_filter:
                    continue
                if level_filter and entry['level'] != level_filter:
                    continue

                entries.append(entry)
                if len(entries) >= limit:
                    return entries

        return entries

    def _parse_log_line(self, line: str) -> dict | None:
        """Parse a hybrid-format line, or return None if it doesn't match."""
        try:
            parts = line.split(' | ', 1)
            if len(parts) != 2:
                return None

            left_part = parts[0]
            json_part = parts[1].strip()

            tokens = left_part.split(None, 3)
            if len(tokens) < 4:
                return None

            timestamp = f"{tokens[0]} {tokens[1]}"
            level = tokens[2].strip()
            operation_and_message = tokens[3]
            if not operation_and_message.startswith('['):
                return None

            bracket_end = operation_and_message.index(']')
            operation = operation_and_message[1:bracket_end]
            message = operation_and_message[bracket_end + 2:].strip()

            data = json.loads(json_part)

            return {
                'timestamp': timestamp,
                'level': level,
                'operation': operation,
                'message': message,
                'data': data
            }
        except (ValueError, IndexError, json.JSONDecodeError):
            return None
