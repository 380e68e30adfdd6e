"""Tests for structured logging and correlation ids."""

import json
import logging

from bidproxy.shared.logging import StructuredFormatter, correlation_id_var, get_logger


def _record(message: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="bidproxy.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_extras_become_top_level_keys(self) -> None:
        output = json.loads(StructuredFormatter().format(_record("Bid approved", bid_id="b1")))

        assert output["message"] == "Bid approved"
        assert output["level"] == "INFO"
        assert output["logger"] == "bidproxy.test"
        assert output["bid_id"] == "b1"

    def test_correlation_id_included(self) -> None:
        token = correlation_id_var.set("corr-42")
        try:
            output = json.loads(StructuredFormatter().format(_record("hello")))
        finally:
            correlation_id_var.reset(token)

        assert output["correlation_id"] == "corr-42"

    def test_colliding_extra_is_prefixed(self) -> None:
        output = json.loads(StructuredFormatter().format(_record("hello", level="custom")))

        assert output["level"] == "INFO"
        assert output["extra_level"] == "custom"

    def test_non_serializable_values_are_stringified(self) -> None:
        output = json.loads(StructuredFormatter().format(_record("hello", amount=object())))

        assert output["amount"].startswith("<object object")


def test_get_logger_does_not_duplicate_handlers() -> None:
    first = get_logger("bidproxy.test.handlers")
    second = get_logger("bidproxy.test.handlers")

    assert first is second
    assert len(second.handlers) == 1
    assert second.propagate is False
