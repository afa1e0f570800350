"""
Tests for configuration and activity logging.
"""

import pytest
from pathlib import Path

from loanbook.activity import ActivityLogger, configure_logging
from loanbook.config import (
    LedgerSettings,
    LoggingSettings,
    StorageSettings,
    get_settings,
)
from loanbook.models import ActivityEventBuilder, ActivityEventType


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_defaults(self, monkeypatch):
        """Test defaults when no environment is set."""
        monkeypatch.delenv("LOANBOOK_DUE_SOON_DAYS", raising=False)
        settings = LedgerSettings()
        assert settings.due_soon_days == 5
        assert settings.worklist_limit == 4
        assert settings.currency_symbol == "₱"

    def test_env_override(self, monkeypatch):
        """Test environment variables with the prefix override defaults."""
        monkeypatch.setenv("LOANBOOK_DUE_SOON_DAYS", "3")
        monkeypatch.setenv("LOANBOOK_STORAGE_DATA_PATH", "/tmp/ledger.json")
        assert LedgerSettings().due_soon_days == 3
        assert StorageSettings().data_path == Path("/tmp/ledger.json")

    def test_log_level_normalized(self):
        """Test the log level is upper-cased."""
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_log_level_rejected(self):
        """Test unknown levels are refused."""
        with pytest.raises(ValueError):
            LoggingSettings(level="chatty")

    def test_get_settings_cached(self):
        """Test the root settings object is cached."""
        assert get_settings() is get_settings()


class TestActivityLogger:
    """Tests for the structlog activity logger."""

    def test_log_returns_event(self):
        """Test log hands back the event it wrote."""
        logger = ActivityLogger("loanbook.tests")
        event = ActivityEventBuilder.borrower_added("b1", "Ana", 1)
        assert logger.log(event) is event

    def test_console_renderer(self):
        """Test logging works with console output too."""
        configure_logging(LoggingSettings(json_output=False))
        try:
            logger = ActivityLogger("loanbook.tests")
            event = logger.log(ActivityEventBuilder.state_loaded(3))
            assert event.event_type == ActivityEventType.STATE_LOADED
        finally:
            configure_logging(LoggingSettings())

    def test_wrappers_build_typed_events(self, activity):
        """Test the log_* helpers emit the matching event types."""
        activity.log_loan_added("b1", "l1", "1000", "Monthly")
        activity.log_snapshot_rejected("bad json")
        assert activity.types() == ["loan_added", "snapshot_rejected"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
