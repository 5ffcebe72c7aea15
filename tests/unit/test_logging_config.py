"""Unit tests for JSON logging setup and request-id propagation."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from mailchimp_bridge.logging_config import JsonFormatter, RequestIdFilter, configure_logging
from mailchimp_bridge.middleware import request_id


def _record(message: str = "hello", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.INFO, "test.py", 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestIdFilter:
    def test_attaches_context_request_id(self):
        token = request_id._request_id.set("req-42")
        try:
            record = _record()
            assert RequestIdFilter().filter(record) is True
        finally:
            request_id._request_id.reset(token)

        assert record.request_id == "req-42"

    def test_outside_a_request(self):
        record = _record()
        RequestIdFilter().filter(record)
        assert record.request_id is None

    def test_explicit_request_id_is_kept(self):
        token = request_id._request_id.set("from-context")
        try:
            record = _record(request_id="explicit")
            RequestIdFilter().filter(record)
        finally:
            request_id._request_id.reset(token)

        assert record.request_id == "explicit"


class TestJsonFormatter:
    def test_exception_is_included(self):
        try:
            raise RuntimeError("upstream exploded")
        except RuntimeError:
            record = logging.LogRecord(
                "test", logging.ERROR, "test.py", 1, "failed", (), sys.exc_info()
            )

        parsed = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: upstream exploded" in parsed["exception"]

    def test_message_args_are_interpolated(self):
        record = logging.LogRecord("test", logging.INFO, "test.py", 1, "Webhook received: %s", ("subscribe",), None)
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["message"] == "Webhook received: subscribe"


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_installs_single_json_handler(self):
        configure_logging("debug")
        configure_logging("DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler.formatter, JsonFormatter)
        assert any(isinstance(f, RequestIdFilter) for f in handler.filters)

    def test_unknown_level_falls_back_to_info(self):
        configure_logging("chatty")
        assert logging.getLogger().level == logging.INFO
