"""Tests for structured logging setup."""

import json
import logging

import pytest

from robo_analytics.observability.logger import get_run_id, new_run_id, set_run_id, setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestRunId:
    def test_set_and_get(self):
        set_run_id("run-1")
        assert get_run_id() == "run-1"

    def test_new_run_id_changes(self):
        first = new_run_id()
        assert new_run_id() != first


class TestSetupLogging:
    def test_json_output_carries_run_id(self, capsys):
        setup_logging(level="INFO", format="json")
        set_run_id("run-42")
        logging.getLogger("robo_analytics.test").info("Drained %d records", 3)
        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "Drained 3 records"
        assert event["run_id"] == "run-42"
        assert event["level"] == "info"
        assert event["logger"] == "robo_analytics.test"

    def test_level_filters(self, capsys):
        setup_logging(level="WARNING", format="console")
        logging.getLogger("robo_analytics.test").info("hidden")
        assert "hidden" not in capsys.readouterr().err
