"""
Tests for structured logging (logger.py).
"""

import json
import logging
from io import StringIO

import pytest

from lead_desk.logger import create_test_logger, logger as default_logger


class TestStructuredLoggerBasic:

    def test_create_logger(self):
        log = create_test_logger("basic")
        assert log.name == "lead_desk.basic"
        assert default_logger.name == "lead_desk"

    def test_set_conversation_id(self):
        log = create_test_logger("conv_id")
        log.clear_conversation()
        assert log.conversation_id is None

        log.set_conversation("sess_123")
        assert log.conversation_id == "sess_123"

        log.clear_conversation()
        assert log.conversation_id is None

    def test_set_context(self):
        log = create_test_logger("context")

        log.set_context(channel="web", ab="b")
        assert log._extra_context == {"channel": "web", "ab": "b"}

        log.clear_context()
        assert log._extra_context == {}

    def test_format_structured(self):
        log = create_test_logger("format")
        log.set_conversation("sess_999")

        result = log._format_structured("INFO", "Turn applied", turn=2)

        assert "timestamp" in result
        assert result["level"] == "INFO"
        assert result["message"] == "Turn applied"
        assert result["conversation_id"] == "sess_999"
        assert result["turn"] == 2
        log.clear_conversation()

    def test_session_block_restores_previous_id(self):
        log = create_test_logger("session")
        log.set_conversation("outer")

        with log.session("inner"):
            assert log.conversation_id == "inner"

        assert log.conversation_id == "outer"
        log.clear_conversation()


class TestStructuredLoggerOutput:

    @pytest.fixture
    def capture(self):
        log = create_test_logger("output")
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(message)s"))
        log.logger.handlers = [handler]
        log.logger.setLevel(logging.DEBUG)
        log.clear_conversation()
        return log, stream

    def test_readable_format(self, capture, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        log, stream = capture

        log.set_conversation("sess_1")
        log.info("Field captured", field="budget")
        log.clear_conversation()

        assert stream.getvalue().strip() == "[sess_1] Field captured [field=budget]"

    def test_json_event(self, capture, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log, stream = capture

        log.event("interest_changed", from_level="cold", to_level="warm")
        record = json.loads(stream.getvalue())

        assert record["level"] == "EVENT"
        assert record["message"] == "interest_changed"
        assert record["to_level"] == "warm"

    def test_json_metric(self, capture, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log, stream = capture

        log.metric("turn_latency_ms", 1.5, turn=1)
        record = json.loads(stream.getvalue())

        assert record["level"] == "METRIC"
        assert record["value"] == 1.5

    def test_json_keeps_unicode(self, capture, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log, stream = capture

        log.info("Reply", text="connect kar raha hoon 😊")
        assert "😊" in stream.getvalue()

    def test_exception_includes_traceback(self, capture, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log, stream = capture

        try:
            raise RuntimeError("boom")
        except RuntimeError:
            log.exception("Turn failed")

        record = json.loads(stream.getvalue())
        assert "RuntimeError: boom" in record["traceback"]
