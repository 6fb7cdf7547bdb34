"""Unit tests for logging configuration."""

import json
import logging

import pytest
from rich.logging import RichHandler

from hearing_scheduler.utils.log_setup import JsonFormatter, setup_logging


@pytest.mark.unit
class TestLogging:
    def test_json_formatter(self):
        record = logging.LogRecord(
            "hearing_scheduler.control.gateway", logging.WARNING, __file__, 1,
            "Hearing %s overridden", ("H1",), None,
        )

        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "hearing_scheduler.control.gateway"
        assert payload["message"] == "Hearing H1 overridden"

    def test_rich_handler_by_default(self):
        setup_logging("debug")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0], RichHandler)

    def test_json_output(self):
        setup_logging("INFO", json_output=True)
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)
