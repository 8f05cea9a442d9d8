"""Unit tests for line framing and frame classification.

Covers the tagged decode steps produced for each kind of line and the
carry-over buffer lifecycle of ``FrameParser``.
"""
from __future__ import annotations

import pytest

from chat_bridge.base.errors import FrameDecodeWarning
from chat_bridge.streaming.frames import (
    DecoderState,
    FrameParser,
    Increment,
    Skip,
    Terminate,
    extract_delta_content,
    parse_frame,
)
from chat_bridge.tests.helpers import delta_frame


@pytest.mark.parametrize(
    "line,reason",
    [
        ("", "keep-alive"),
        ("   \r", "keep-alive"),
        (": ping", "non-data"),
        ("event: message", "non-data"),
        ("data:{}", "non-data"),
        ('data: {"choices":[{"delta":{"role":"assistant"}}]}', "empty-delta"),
        ('data: {"choices":[{"delta":{"content":""}}]}', "empty-delta"),
        ('data: {"choices":[{"finish_reason":"stop"}]}', "empty-delta"),
        ('data: {"choices":[]}', "empty-delta"),
    ],
)
def test_lines_without_text_are_skipped(line, reason):
    step = parse_frame(line)
    assert isinstance(step, Skip) and step.reason == reason  # nosec B101 - pytest assert in tests
    assert step.warning is None  # nosec B101 - pytest assert in tests


@pytest.mark.parametrize(
    "payload",
    ["{not json", '"a string"', '{"choices": "oops"}', '{"choices":[{"delta":"x"}]}', '{"choices":[{"delta":{"content":5}}]}'],
)
def test_malformed_payload_carries_warning(payload):
    step = parse_frame(f"data: {payload}")
    assert isinstance(step, Skip) and step.reason == "malformed"  # nosec B101 - pytest assert in tests
    assert isinstance(step.warning, FrameDecodeWarning)  # nosec B101 - pytest assert in tests
    assert step.warning.payload == payload  # nosec B101 - pytest assert in tests


def test_sentinel_and_increment():
    assert isinstance(parse_frame("data: [DONE]"), Terminate)  # nosec B101 - pytest assert in tests
    assert isinstance(parse_frame("data: [DONE]\r"), Terminate)  # nosec B101 - pytest assert in tests
    assert parse_frame(delta_frame("Hel").decode()) == Increment("Hel")  # nosec B101 - pytest assert in tests


def test_extract_delta_content_missing_keys_is_none():
    assert extract_delta_content({}) is None  # nosec B101 - pytest assert in tests
    assert extract_delta_content({"choices": [{}]}) is None  # nosec B101 - pytest assert in tests
    with pytest.raises(ValueError):
        extract_delta_content([1, 2])


def test_parser_buffers_partial_line_until_newline():
    parser = FrameParser()
    frame = delta_frame("abc")
    assert parser.feed(frame[:10]) == []  # nosec B101 - pytest assert in tests
    assert parser.state is DecoderState.BUFFERING_PARTIAL_LINE  # nosec B101 - pytest assert in tests
    assert parser.buffer == frame[:10].decode()  # nosec B101 - pytest assert in tests
    assert parser.feed(frame[10:]) == [Increment("abc")]  # nosec B101 - pytest assert in tests
    assert parser.state is DecoderState.AWAITING_DATA and parser.buffer == ""  # nosec B101 - pytest assert in tests


def test_parser_stops_at_sentinel_and_ignores_later_input():
    parser = FrameParser()
    steps = parser.feed(delta_frame("a") + b"data: [DONE]\n" + delta_frame("b"))
    assert steps[0] == Increment("a") and isinstance(steps[-1], Terminate)  # nosec B101 - pytest assert in tests
    assert len(steps) == 2  # nosec B101 - pytest assert in tests
    assert parser.state is DecoderState.TERMINATED  # nosec B101 - pytest assert in tests
    assert parser.feed(delta_frame("c")) == [] and parser.finish() == []  # nosec B101 - pytest assert in tests


def test_finish_parses_unterminated_tail():
    parser = FrameParser()
    parser.feed(delta_frame("tail").rstrip(b"\n"))
    assert parser.finish() == [Increment("tail")]  # nosec B101 - pytest assert in tests
    assert parser.state is DecoderState.TERMINATED  # nosec B101 - pytest assert in tests


def test_multibyte_character_split_between_chunks():
    parser = FrameParser()
    frame = delta_frame("né")
    cut = frame.index("é".encode("utf-8")) + 1
    assert parser.feed(frame[:cut]) == []  # nosec B101 - pytest assert in tests
    assert parser.feed(frame[cut:]) == [Increment("né")]  # nosec B101 - pytest assert in tests


def test_deeply_nested_payload_is_malformed_not_fatal():
    step = parse_frame("data: " + "[" * 100_000)
    assert isinstance(step, Skip) and step.reason == "malformed"  # nosec B101 - pytest assert in tests
    assert isinstance(step.warning, FrameDecodeWarning)  # nosec B101 - pytest assert in tests


def test_overlong_unterminated_line_is_reported_once_and_dropped():
    parser = FrameParser(max_line_length=64)
    first = parser.feed(b"data: " + b"x" * 70)
    assert len(first) == 1 and first[0].reason == "malformed"  # nosec B101 - pytest assert in tests
    assert parser.buffer == ""  # nosec B101 - pytest assert in tests
    assert parser.state is DecoderState.BUFFERING_PARTIAL_LINE  # nosec B101 - pytest assert in tests
    assert parser.feed(b"y" * 100) == []  # nosec B101 - pytest assert in tests
    assert parser.feed(b"zz\n" + delta_frame("ok")) == [Increment("ok")]  # nosec B101 - pytest assert in tests
    assert parser.state is DecoderState.AWAITING_DATA  # nosec B101 - pytest assert in tests


def test_overlong_complete_line_is_malformed():
    parser = FrameParser(max_line_length=64)
    steps = parser.feed(b"data: " + b"x" * 80 + b"\n" + delta_frame("a"))
    assert steps[0].reason == "malformed" and steps[1] == Increment("a")  # nosec B101 - pytest assert in tests


def test_dropped_tail_is_not_parsed_at_finish():
    parser = FrameParser(max_line_length=8)
    parser.feed(b"data: 0123456789")
    assert parser.finish() == []  # nosec B101 - pytest assert in tests


def test_many_small_chunks_without_newline_accumulate():
    parser = FrameParser()
    frame = delta_frame("piecewise")
    for i in range(len(frame) - 1):
        assert parser.feed(frame[i:i + 1]) == []  # nosec B101 - pytest assert in tests
    assert parser.buffer == frame[:-1].decode()  # nosec B101 - pytest assert in tests
    assert parser.feed(b"\n") == [Increment("piecewise")]  # nosec B101 - pytest assert in tests
