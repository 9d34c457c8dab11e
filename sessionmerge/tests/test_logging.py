"""
Unit Tests: Structured Logging

Tests:
    - Keyword extras and request context reach the JSON line
    - Context is scoped to the with-block
    - Level filtering and setup_logging
"""

import io
import json
import logging

import pytest

from sessionmerge.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    setup_logging,
)


@pytest.fixture
def json_stream():
    """Attach a JSON handler to the sessionmerge.test logger."""
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    target = logging.getLogger("sessionmerge.test")
    target.addHandler(handler)
    yield stream
    target.removeHandler(handler)


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestStructuredLogger:
    def test_extras_and_context(self, json_stream):
        log = StructuredLogger("sessionmerge.test", level=LogLevel.DEBUG)

        with log.context(session_key="session_abc"):
            log.warning("Re-fetch failed", error_code="STORE_TIMEOUT")
        log.info("after")

        first, second = _lines(json_stream)
        assert first["level"] == "WARNING"
        assert first["message"] == "Re-fetch failed"
        assert first["logger"] == "sessionmerge.test"
        assert first["session_key"] == "session_abc"
        assert first["error_code"] == "STORE_TIMEOUT"
        assert "session_key" not in second

    def test_level_filtering(self, json_stream):
        log = StructuredLogger("sessionmerge.test", level=LogLevel.ERROR)
        log.debug("hidden")
        log.warning("hidden")
        log.error("shown")

        assert [line["message"] for line in _lines(json_stream)] == ["shown"]

    def test_name(self):
        assert StructuredLogger("sessionmerge.engine").name == "sessionmerge.engine"


class TestLogLevel:
    def test_from_name(self):
        assert LogLevel.from_name("warning") is LogLevel.WARNING

    def test_unknown(self):
        with pytest.raises(KeyError):
            LogLevel.from_name("LOUD")


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_output(self):
        stream = io.StringIO()
        setup_logging(LogLevel.INFO, json_output=True, stream=stream)

        StructuredLogger("sessionmerge.setup").info("hello", session_key="session_x")

        line = json.loads(stream.getvalue())
        assert line["message"] == "hello"
        assert line["session_key"] == "session_x"

    def test_plain_output(self):
        stream = io.StringIO()
        setup_logging(LogLevel.INFO, json_output=False, stream=stream)

        StructuredLogger("sessionmerge.setup").info("hello")
        assert "| INFO     | sessionmerge.setup | hello" in stream.getvalue()
