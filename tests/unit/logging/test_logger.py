# tests/unit/logging/test_logger.py - v3
"""Tests for logging/logger.py: logger factory and formatters."""

from __future__ import annotations

import json
import logging

from docwrite.config.settings import Settings
from docwrite.logging.context import clear_context, set_item_context, set_request_context
from docwrite.logging.logger import (
    ROOT_LOGGER,
    JsonFormatter,
    TextFormatter,
    setup_logging,
    setup_logging_from_settings,
)


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_request_context("entries", "req-9")
        set_item_context("id-1")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {
            "collection": "entries", "request_id": "req-9", "identifier": "id-1",
        }

    def test_format_with_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"count": 3})))
        assert parsed["data"] == {"count": 3}


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_includes_collection_and_identifier(self):
        set_request_context("entries", None)
        set_item_context("id-1")
        output = TextFormatter().format(_record())
        assert "[entries]" in output
        assert "(id-1)" in output


class TestSetup:
    def teardown_method(self):
        root = logging.getLogger(ROOT_LOGGER)
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_setup_replaces_handlers(self):
        setup_logging(level="DEBUG", log_format="text")
        setup_logging(level="DEBUG", log_format="text")
        root = logging.getLogger(ROOT_LOGGER)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_setup_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "docwrite.log"
        setup_logging(log_file=str(log_file))
        root = logging.getLogger(ROOT_LOGGER)
        assert len(root.handlers) == 2
        assert log_file.parent.is_dir()

    def test_setup_from_settings(self):
        setup_logging_from_settings(Settings(_env_file=None, log_level="WARNING"))
        root = logging.getLogger(ROOT_LOGGER)
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
