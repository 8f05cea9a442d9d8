"""Pytest configuration for the chat bridge test suite.

Provides structured-log capture on the shared ``chat_bridge`` logger (it does
not propagate to the root logger, so ``caplog`` cannot see its records), a
clean HTTP client pool, and isolation of the configuration environment.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List

import pytest

from chat_bridge.base.http import close_all_clients
from chat_bridge.base.logging import get_logger
from chat_bridge.config import reset_config_cache
from chat_bridge.config.env import reset_dotenv_state

_CONFIG_ENV = (
    "CHAT_BRIDGE_ENDPOINT",
    "CHAT_BRIDGE_API_KEY",
    "CHAT_BRIDGE_MODEL",
    "CHAT_BRIDGE_MAX_TOKENS",
    "CHAT_BRIDGE_CONFIG_FILE",
)


class LogCapture:
    """Collects records emitted under the ``chat_bridge`` logger."""

    def __init__(self) -> None:
        self.records: List[logging.LogRecord] = []

    def payloads(self) -> List[Dict[str, Any]]:
        out = []
        for r in self.records:
            try:
                data = json.loads(r.getMessage())
            except ValueError:
                continue
            if isinstance(data, dict):
                data["_level"] = r.levelno
                out.append(data)
        return out

    def events(self) -> List[str]:
        return [p["event"] for p in self.payloads() if "event" in p]

    def find(self, event: str) -> List[Dict[str, Any]]:
        return [p for p in self.payloads() if p.get("event") == event]


@pytest.fixture()
def log_capture(monkeypatch: pytest.MonkeyPatch) -> Iterator[LogCapture]:
    """Capture every bridge log event, DEBUG included."""
    monkeypatch.setenv("CHAT_BRIDGE_LOG_LEVEL", "DEBUG")
    capture = LogCapture()
    handler = logging.Handler(level=logging.DEBUG)
    handler.emit = capture.records.append  # type: ignore[assignment]
    base = get_logger("chat_bridge")
    base.addHandler(handler)
    try:
        yield capture
    finally:
        base.removeHandler(handler)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Keep host environment and any local ``.env`` out of config resolution."""
    for name in _CONFIG_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CHAT_BRIDGE_DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    reset_dotenv_state()
    yield
    reset_config_cache()
    reset_dotenv_state()


@pytest.fixture()
def clean_http_pool() -> Iterator[None]:
    close_all_clients()
    yield
    close_all_clients()
