"""Tests for command prompts, referenced files and follow-up suggestions."""
from __future__ import annotations

import pytest

from chat_bridge.base.models import Message
from chat_bridge.service.prompts import (
    GENERIC_SYSTEM_PROMPT,
    SUMMARIZE_SYSTEM_PROMPT,
    TRANSLATE_SYSTEM_PROMPT,
    build_messages,
    followups,
)


def test_generic_command_with_references():
    msgs = build_messages(None, "What does this do?", [("src/app.py", "print('hi')")])
    assert msgs[0] == Message("system", GENERIC_SYSTEM_PROMPT)  # nosec B101 - pytest assert in tests
    assert msgs[1] == Message("user", "What does this do?")  # nosec B101 - pytest assert in tests
    assert msgs[2] == Message("user", "Referenced file src/app.py:\n```\nprint('hi')\n```")  # nosec B101 - pytest assert in tests


def test_explain_follows_generic_path():
    assert build_messages("explain", "x", [("a", "b")]) == build_messages(None, "x", [("a", "b")])  # nosec B101 - pytest assert in tests


def test_summarize_prefixes_prompt_and_ignores_references():
    msgs = build_messages("summarize", "long text", [("a", "b")])
    assert msgs == [  # nosec B101 - pytest assert in tests
        Message("system", SUMMARIZE_SYSTEM_PROMPT),
        Message("user", "Please summarize the following: long text"),
    ]


def test_translate():
    msgs = build_messages("translate", "Hola")
    assert [m.role for m in msgs] == ["system", "user"]  # nosec B101 - pytest assert in tests
    assert msgs[0].content == TRANSLATE_SYSTEM_PROMPT and msgs[1].content == "Hola"  # nosec B101 - pytest assert in tests


def test_unknown_command():
    with pytest.raises(ValueError):
        build_messages("sing", "la")


def test_followups():
    items = followups()
    assert [f.command for f in items] == ["explain", "summarize", "translate"]  # nosec B101 - pytest assert in tests
    assert items[0].prompt == "Can you explain this in more detail?"  # nosec B101 - pytest assert in tests
    assert items[2].label == "🌐 Translate"  # nosec B101 - pytest assert in tests
