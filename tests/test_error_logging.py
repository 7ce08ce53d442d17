"""Tests for error logging module."""

import json
from datetime import datetime, timedelta

import pytest

from libtoggle.error_logging import (
    ErrorEntry,
    ErrorLogger,
    ErrorType,
    classify_error,
    log_error,
)
from libtoggle.errors import (
    AssetNotFoundError,
    CollisionError,
    ImportSourceError,
    InvalidNameError,
    NotAssetError,
    UnknownGroupError,
)
from libtoggle.kinds import AssetKind


@pytest.fixture
def logger(tmp_path):
    return ErrorLogger(error_file=tmp_path / "errors.jsonl")


def log_collision(logger, message="stray.md already exists in demo", subcommand="move-command"):
    logger.log_error(
        command=f"libtoggle {subcommand} stray.md demo",
        subcommand=subcommand,
        error_type=ErrorType.COLLISION,
        message=message,
    )


class TestErrorEntry:
    """Tests for ErrorEntry dataclass."""

    def test_error_entry_to_dict(self):
        entry = ErrorEntry(
            timestamp="2026-03-02T10:42:00Z",
            command="libtoggle commands bmad on",
            subcommand="commands",
            error_type=ErrorType.UNKNOWN_GROUP,
            message="Unknown command group: bmad",
            context={"group": "bmad"},
        )

        result = entry.to_dict()

        assert result["error_type"] == "UNKNOWN_GROUP"
        assert result["error_code"] == "UNKNOWN_GROUP"
        assert result["context"] == {"group": "bmad"}

    def test_context_omitted_when_missing(self):
        entry = ErrorEntry(
            timestamp="2026-03-02T10:42:00Z",
            command="libtoggle scan",
            subcommand="scan",
            error_type=ErrorType.UNEXPECTED_ERROR,
            message="boom",
        )
        assert "context" not in entry.to_dict()


class TestClassifyError:

    @pytest.mark.parametrize("error,expected", [
        (UnknownGroupError(AssetKind.COMMAND, "bmad"), ErrorType.UNKNOWN_GROUP),
        (AssetNotFoundError("gone"), ErrorType.NOT_FOUND),
        (NotAssetError("link"), ErrorType.NOT_ASSET),
        (CollisionError("taken"), ErrorType.COLLISION),
        (InvalidNameError("../x"), ErrorType.INVALID_NAME),
        (ImportSourceError("bad url"), ErrorType.IMPORT_FAILED),
        (RuntimeError("bug"), ErrorType.UNEXPECTED_ERROR),
    ])
    def test_maps_exceptions(self, error, expected):
        assert classify_error(error) is expected


class TestErrorLogger:
    """Tests for ErrorLogger class."""

    def test_logger_creates_error_file(self, logger):
        log_collision(logger)

        lines = logger.error_file.read_text().strip().split('\n')
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["error_type"] == "COLLISION"
        assert entry["subcommand"] == "move-command"

    def test_logger_rotation_on_size_limit(self, tmp_path):
        """Test that logger respects max entries limit."""
        logger = ErrorLogger(error_file=tmp_path / "errors.jsonl", max_entries=5)

        for i in range(10):
            log_collision(logger, message=f"Error {i}")

        lines = logger.error_file.read_text().strip().split('\n')
        assert len(lines) == 5
        assert json.loads(lines[-1])["message"] == "Error 9"


class TestGetErrorStats:
    """Tests for get_error_stats function."""

    def test_get_error_stats_empty(self, logger):
        stats = logger.get_error_stats(days=7)

        assert stats == {"total": 0, "by_type": {}, "by_command": {}, "by_group": {}}

    def test_get_error_stats_aggregates(self, logger):
        for _ in range(3):
            log_collision(logger)
        for _ in range(2):
            logger.log_error(
                command="libtoggle commands bmad on",
                subcommand="commands",
                error_type=ErrorType.UNKNOWN_GROUP,
                message="Unknown command group: bmad",
            )

        stats = logger.get_error_stats(days=7)

        assert stats["total"] == 5
        assert stats["by_type"] == {"COLLISION": 3, "UNKNOWN_GROUP": 2}
        assert stats["by_command"] == {"move-command": 3, "commands": 2}

    def test_by_group_uses_logged_kind_and_group(self, logger):
        logger.log_error(
            command="libtoggle skills marketing on",
            subcommand="skills",
            error_type=ErrorType.UNKNOWN_GROUP,
            message="Unknown skill group: marketing",
            context={"group": "marketing", "kind": "skill"},
        )
        logger.log_error(
            command="libtoggle scan",
            subcommand="scan",
            error_type=ErrorType.UNEXPECTED_ERROR,
            message="boom",
        )

        assert logger.get_error_stats()["by_group"] == {"skill/marketing": 1}

    def test_error_type_filter(self, logger):
        log_collision(logger)
        logger.log_error(
            command="libtoggle commands bmad on",
            subcommand="commands",
            error_type=ErrorType.UNKNOWN_GROUP,
            message="Unknown command group: bmad",
        )

        stats = logger.get_error_stats(error_type="COLLISION")

        assert stats["total"] == 1
        assert stats["by_command"] == {"move-command": 1}
        assert [e["error_type"] for e in logger.get_recent_errors(error_type="COLLISION")] == ["COLLISION"]

    def test_get_error_stats_filters_by_days(self, logger):
        now = datetime.now()
        with open(logger.error_file, 'a') as f:
            for when, message in [(now - timedelta(days=10), "Old"), (now, "New")]:
                f.write(json.dumps({
                    "timestamp": when.isoformat() + "Z",
                    "command": "libtoggle scan",
                    "subcommand": "scan",
                    "error_type": "UNEXPECTED_ERROR",
                    "message": message,
                }) + '\n')
            f.write("this is not json\n")

        assert logger.get_error_stats(days=7)["total"] == 1
        assert logger.get_error_stats(days=30)["total"] == 2


class TestGetRecentErrors:

    def test_most_recent_first_with_limit(self, logger):
        for i in range(6):
            log_collision(logger, message=f"Error {i}")

        errors = logger.get_recent_errors(limit=3)

        assert [e["message"] for e in errors] == ["Error 5", "Error 4", "Error 3"]


class TestModuleLevelFunctions:
    """Tests for module-level convenience functions."""

    def test_default_path_under_home(self, isolated_home):
        log_error(
            command="libtoggle skills nope on",
            subcommand="skills",
            error_type=ErrorType.UNKNOWN_GROUP,
            message="Unknown skill group: nope",
        )

        error_file = isolated_home / ".libtoggle" / "errors.jsonl"
        assert error_file.exists()
        [entry] = ErrorLogger(error_file=error_file).get_recent_errors()
        assert entry["message"] == "Unknown skill group: nope"
