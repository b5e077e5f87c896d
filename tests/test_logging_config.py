"""Tests for logging setup."""

import json
import logging

import pytest

from finplan.logging_config import CustomJsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_replaces_handlers():
    """Test that setup_logging installs exactly one handler at the given level."""
    setup_logging("debug")
    setup_logging("INFO")

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert len(root.handlers) == 1


def test_setup_logging_json_uses_json_formatter():
    """Test that json_format selects the JSON formatter."""
    setup_logging("WARNING", json_format=True)

    assert isinstance(logging.getLogger().handlers[0].formatter, CustomJsonFormatter)


def test_json_formatter_adds_metadata():
    """Test that records carry timestamp, level, service and extra fields."""
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    record = logging.LogRecord("finplan.test", logging.WARNING, __file__, 1, "hello", None, None)
    record.category_id = "groceries"

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "hello"
    assert payload["level"] == "WARNING"
    assert payload["service"] == "finplan"
    assert payload["name"] == "finplan.test"
    assert payload["category_id"] == "groceries"
    assert payload["timestamp"]
