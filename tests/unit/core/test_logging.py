import json
import logging
import sys

import pytest

from netmonitor.core.logger import RedactingFilter, get_logger
from shared.logging.json import CustomJsonFormatter, SensitiveDataFilter, configure_logging


def make_record(msg="stats_cycle_finished", **extra):
    record = logging.LogRecord(
        name="netmonitor.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestSensitiveDataFilter:
    def test_matching_keys_redacted_recursively(self):
        sdf = SensitiveDataFilter(["password", "api_key"])
        out = sdf.filter(
            {"user": "a", "Password": "x", "nested": {"api_key": "k", "pages": 3}}
        )
        assert out == {
            "user": "a",
            "Password": "[REDACTED]",
            "nested": {"api_key": "[REDACTED]", "pages": 3},
        }


class TestCustomJsonFormatter:
    def test_emits_one_json_object_with_context(self):
        formatter = CustomJsonFormatter("netmonitor", "production", ["secret"])
        line = formatter.format(make_record(family="usage", client_secret="s3"))
        data = json.loads(line)

        assert data["message"] == "stats_cycle_finished"
        assert data["service"] == "netmonitor"
        assert data["environment"] == "production"
        assert data["family"] == "usage"
        assert data["client_secret"] == "[REDACTED]"
        assert "timestamp" in data and "hostname" in data
        assert "msg" not in data and "args" not in data

    def test_exception_is_structured(self):
        formatter = CustomJsonFormatter("netmonitor", "production", [])
        try:
            raise ValueError("bad page")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()
        data = json.loads(formatter.format(record))
        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad page"


class TestConfigureLogging:
    def test_production_uses_json(self, restore_root_logging):
        root = configure_logging("netmonitor", "production", "debug", ["secret"])
        assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)
        assert root.level == logging.DEBUG

    def test_development_uses_plain_text(self, restore_root_logging):
        root = configure_logging("netmonitor", "development", "INFO", [])
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, CustomJsonFormatter)


class TestRedactingFilter:
    def test_sensitive_message_replaced(self):
        record = make_record("authorization header was Bearer abc")
        assert RedactingFilter(["authorization"]).filter(record) is True
        assert record.getMessage() == "[REDACTED SENSITIVE LOG CONTENT]"

    def test_plain_message_untouched(self):
        record = make_record("page_fetched")
        RedactingFilter(["password"]).filter(record)
        assert record.getMessage() == "page_fetched"


def test_get_logger_returns_propagating_logger():
    logger = get_logger("netmonitor.some.component")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "netmonitor.some.component"
    assert logger.propagate is True
    assert get_logger("netmonitor.some.component") is logger
