"""Tests for logging configuration."""

from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
import structlog

from idle_engine.core.config import Settings
from idle_engine.core.logging import clear_context, setup_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after each test."""
    yield
    clear_context()
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for configuring logging from Settings."""

    def test_production_logs_json_with_app_context(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test production settings emit JSON tagged with the app name and version."""
        settings = Settings(app_name="Test Idle", app_version="9.9.9")
        setup_logging(settings)

        structlog.get_logger("test").info("Monster killed", monster_id="chicken")

        entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["event"] == "Monster killed"
        assert entry["monster_id"] == "chicken"
        assert entry["app"] == "Test Idle"
        assert entry["app_version"] == "9.9.9"

    def test_log_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test entries below the configured level are dropped."""
        setup_logging(Settings(log_level="WARNING"))

        logger = structlog.get_logger("test")
        logger.info("Quiet")
        logger.warning("Loud")

        out = capsys.readouterr().out
        assert "Quiet" not in out
        assert "Loud" in out

    def test_debug_mode_logs_everything(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test debug mode lowers the level to DEBUG and uses the console renderer."""
        setup_logging(Settings(debug=True, log_level="ERROR"))

        structlog.get_logger("test").debug("Tick advanced", ticks=5)

        out = capsys.readouterr().out
        assert "Tick advanced" in out
        assert not out.strip().startswith("{")
