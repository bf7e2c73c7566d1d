"""Unit tests for logging setup."""

import json

import pytest
import structlog

from markertime.core.expression import TimeExpression
from markertime.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


@pytest.mark.unit
class TestSetupLogging:
    def test_json_output(self, capsys):
        setup_logging("INFO", json_logs=True)

        structlog.get_logger().info("marker_saved", marker_id=7)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "marker_saved"
        assert payload["marker_id"] == 7
        assert payload["level"] == "info"

    def test_level_filters_debug(self, capsys):
        setup_logging("INFO", json_logs=True)

        structlog.get_logger().debug("hidden")

        assert capsys.readouterr().out == ""

    def test_level_from_settings(self, capsys, monkeypatch):
        monkeypatch.setenv("MARKERTIME_LOG_LEVEL", "debug")
        monkeypatch.setenv("MARKERTIME_JSON_LOGS", "true")
        setup_logging()

        expression = TimeExpression()
        expression.parse("=oops")

        events = [
            json.loads(line) for line in capsys.readouterr().out.strip().splitlines()
        ]
        assert any(
            event["event"] == "expression_invalid" and event["text"] == "=oops"
            for event in events
        )

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging("LOUD")
