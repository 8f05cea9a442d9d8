"""Focused tests for chat_bridge.base.logging.

Covers:
- _parse_level string parsing
- normalized_log_event emits required keys and drops ``None`` extras
- JsonFormatter hoists structured payloads
- configure_logger attaches and removes a managed file handler
"""
from __future__ import annotations

import json
import logging

from chat_bridge.base.log_support import JsonFormatter, LogContext
from chat_bridge.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_child_loggers_propagate_to_shared_base():
    child = get_logger("chat_bridge.test.child")
    base = get_logger()
    assert child.propagate and not child.handlers  # nosec B101
    assert base.name == "chat_bridge" and base.propagate is False  # nosec B101


def test_normalized_log_event_emits_required_keys(log_capture):
    logger = get_logger("chat_bridge.test.logging")
    ctx = LogContext(model="m", endpoint="http://ai.local", extra={"session": None, "host": "cli"})
    normalized_log_event(logger, "stream.sentinel", ctx, phase="finalize", emitted=3, outcome="sentinel", skipped=None)

    payload = log_capture.find("stream.sentinel")[0]
    for key in REQUIRED_NORMALIZED_KEYS:
        assert key in payload, f"missing normalized key: {key}"  # nosec B101
    assert payload["error_code"] is None and payload["emitted"] == 3  # nosec B101
    assert payload["host"] == "cli" and "session" not in payload  # nosec B101
    assert "skipped" not in payload and payload["outcome"] == "sentinel"  # nosec B101


def test_log_event_respects_level(log_capture, monkeypatch):
    monkeypatch.setenv("CHAT_BRIDGE_LOG_LEVEL", "WARNING")
    logger = get_logger("chat_bridge.test.level")
    log_event(logger, "quiet.event", level=logging.INFO)
    log_event(logger, "loud.event", level=logging.ERROR)
    events = log_capture.events()
    assert "quiet.event" not in events and "loud.event" in events  # nosec B101


def test_json_formatter_hoists_payload():
    record = logging.LogRecord("chat_bridge.x", logging.INFO, __file__, 1, json.dumps({"event": "e", "n": 1}), None, None)
    out = json.loads(JsonFormatter().format(record))
    assert out["event"] == "e" and out["n"] == 1  # nosec B101
    assert out["level"] == "INFO" and out["logger"] == "chat_bridge.x" and "msg" not in out  # nosec B101


def test_json_formatter_keeps_plain_message():
    record = logging.LogRecord("chat_bridge.x", logging.WARNING, __file__, 1, "plain %s", ("text",), None)
    out = json.loads(JsonFormatter().format(record))
    assert out["msg"] == "plain text"  # nosec B101


def test_configure_logger_file_handler(tmp_path):
    path = tmp_path / "logs" / "bridge.log"
    logger = configure_logger(level="INFO", file_path=str(path))
    try:
        log_event(logger, "file.event", phase="open")
        for h in logger.handlers:
            h.flush()
        lines = path.read_text(encoding="utf-8").strip().splitlines()
        assert json.loads(lines[-1])["event"] == "file.event"  # nosec B101
    finally:
        configure_logger(file_path=None)
    assert not [h for h in logger.handlers if h.__class__.__name__ == "RotatingFileHandler"]  # nosec B101
