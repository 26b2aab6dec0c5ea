"""
Tests for logging setup.

Requires Python 3.11+.
"""

import importlib
from pathlib import Path

import pytest
import structlog

from utils.config import get_settings
from utils.logger import close_log_file, configure_logging

# utils/__init__ re-exports a `logger` object that shadows the submodule attribute.
logger_module = importlib.import_module("utils.logger")


class TestLogFile:
    """Diagnostics written to LOG_FILE_PATH."""

    @pytest.fixture
    def log_path(self, fresh_settings, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "designsync.log"
        monkeypatch.setenv("LOG_FILE_PATH", str(path))
        get_settings.cache_clear()
        yield path
        close_log_file()
        structlog.reset_defaults()

    def test_reconfigure_closes_previous_handle(self, log_path: Path):
        configure_logging(fmt="json")
        first = logger_module._log_file

        configure_logging(fmt="json")

        assert first is not None and first.closed
        assert not logger_module._log_file.closed

    def test_entries_written_to_file(self, log_path: Path):
        configure_logging(fmt="json")
        structlog.get_logger("designsync").warning("file_entry", record_id="ws_test123")
        close_log_file()

        content = log_path.read_text()
        assert '"event": "file_entry"' in content
        assert logger_module._log_file is None
