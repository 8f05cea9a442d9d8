"""Frame parsing for ``data:`` framed chat completion streams.

``FrameParser`` is the decoder's state machine. It owns the carry-over buffer
holding the unterminated tail of the last chunk, so a frame split across any
number of chunk boundaries is reassembled before it is parsed. Each complete
line becomes exactly one tagged decode step:

- ``Increment``: a non-empty text delta to deliver.
- ``Skip``: keep-alive, non-``data:`` line, delta without text, or a
  malformed payload or overlong line (carries a ``FrameDecodeWarning``).
- ``Terminate``: the ``[DONE]`` sentinel; nothing after it is parsed.
- ``Error``: a failure raised by the chunk source (produced by the decoder).
"""
from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Union

from ..base.errors import BridgeError, FrameDecodeWarning

DATA_PREFIX = "data: "
SENTINEL = "[DONE]"
LINE_TERMINATOR = "\n"
MAX_LINE_LENGTH = 1 << 20
_PREVIEW_CHARS = 80


class DecoderState(str, Enum):
    AWAITING_DATA = "awaiting_data"
    BUFFERING_PARTIAL_LINE = "buffering_partial_line"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class Increment:
    text: str


@dataclass(frozen=True)
class Skip:
    reason: str
    warning: Optional[FrameDecodeWarning] = None


@dataclass(frozen=True)
class Terminate:
    pass


@dataclass(frozen=True)
class Error:
    error: BridgeError


DecodeStep = Union[Increment, Skip, Terminate, Error]


def extract_delta_content(data: Any) -> Optional[str]:
    """Return ``choices[0].delta.content`` from a decoded payload.

    Missing keys yield ``None`` (role-only deltas, ``finish_reason`` frames).
    Keys present with the wrong type raise ``ValueError``.
    """
    if not isinstance(data, dict):
        raise ValueError("payload is not a JSON object")
    choices = data.get("choices")
    if not choices:
        return None
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        raise ValueError("choices is not a list of objects")
    delta = choices[0].get("delta")
    if delta is None:
        return None
    if not isinstance(delta, dict):
        raise ValueError("delta is not an object")
    content = delta.get("content")
    if content is None:
        return None
    if not isinstance(content, str):
        raise ValueError("delta.content is not a string")
    return content


def parse_frame(line: str) -> DecodeStep:
    """Turn one complete line into a decode step."""
    frame = line.strip()
    if not frame:
        return Skip("keep-alive")
    if not frame.startswith(DATA_PREFIX):
        return Skip("non-data")
    payload = frame[len(DATA_PREFIX):]
    if payload == SENTINEL:
        return Terminate()
    try:
        text = extract_delta_content(json.loads(payload))
    except (ValueError, RecursionError) as exc:
        # json.JSONDecodeError is a ValueError; deep nesting exhausts the stack
        return Skip("malformed", FrameDecodeWarning(payload, str(exc)))
    if not text:
        return Skip("empty-delta")
    return Increment(text)


class FrameParser:
    """Incremental line framer with an explicit three-state lifecycle.

    ``feed`` decodes a raw chunk (multi-byte UTF-8 sequences split between
    chunks are held back by an incremental decoder), collects it in the
    carry-over buffer and parses every complete line. Parsing stops at the
    sentinel; the parser is then ``TERMINATED`` and its buffer discarded.

    A line longer than ``max_line_length`` characters is reported once as a
    malformed frame and the rest of it is dropped up to the next newline, so
    a peer that never terminates a line cannot grow the buffer without bound.
    """

    def __init__(self, encoding: str = "utf-8", *, max_line_length: int = MAX_LINE_LENGTH) -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending: List[str] = []
        self._pending_len = 0
        self._discarding = False
        self._max_line_length = max_line_length
        self.state = DecoderState.AWAITING_DATA

    @property
    def buffer(self) -> str:
        """The unterminated tail retained between chunks."""
        return "".join(self._pending)

    def feed(self, chunk: bytes) -> List[DecodeStep]:
        if self.state is DecoderState.TERMINATED:
            return []
        text = self._decoder.decode(chunk)
        steps: List[DecodeStep] = []
        if LINE_TERMINATOR not in text:
            if not self._discarding and text:
                self._hold(text)
                if self._pending_len > self._max_line_length:
                    steps.append(self._drop_pending())
            self._update_state()
            return steps
        first, *middle, tail = text.split(LINE_TERMINATOR)
        if self._discarding:
            # the newline ends the oversized line that was already reported
            self._discarding = False
            lines = middle
        else:
            lines = ["".join(self._pending) + first, *middle]
        self._pending = []
        self._pending_len = 0
        for line in lines:
            step = self._overlong(line) if len(line) > self._max_line_length else parse_frame(line)
            steps.append(step)
            if isinstance(step, Terminate):
                self.terminate()
                return steps
        if tail:
            self._hold(tail)
            if self._pending_len > self._max_line_length:
                steps.append(self._drop_pending())
        self._update_state()
        return steps

    def finish(self) -> List[DecodeStep]:
        """Flush at end of input; a final unterminated frame is still parsed."""
        if self.state is DecoderState.TERMINATED:
            return []
        tail = "".join(self._pending) + self._decoder.decode(b"", final=True)
        discarding = self._discarding
        self.terminate()
        if discarding or not tail.strip():
            return []
        if len(tail) > self._max_line_length:
            return [self._overlong(tail)]
        return [parse_frame(tail)]

    def terminate(self) -> None:
        self._pending = []
        self._pending_len = 0
        self._discarding = False
        self.state = DecoderState.TERMINATED

    def _hold(self, text: str) -> None:
        self._pending.append(text)
        self._pending_len += len(text)

    def _drop_pending(self) -> Skip:
        step = self._overlong("".join(self._pending))
        self._pending = []
        self._pending_len = 0
        self._discarding = True
        return step

    def _overlong(self, line: str) -> Skip:
        return Skip(
            "malformed",
            FrameDecodeWarning(line[:_PREVIEW_CHARS], f"line exceeds {self._max_line_length} characters"),
        )

    def _update_state(self) -> None:
        partial = bool(self._pending) or self._discarding
        self.state = DecoderState.BUFFERING_PARTIAL_LINE if partial else DecoderState.AWAITING_DATA


__all__ = [
    "DATA_PREFIX",
    "SENTINEL",
    "MAX_LINE_LENGTH",
    "DecoderState",
    "Increment",
    "Skip",
    "Terminate",
    "Error",
    "DecodeStep",
    "extract_delta_content",
    "parse_frame",
    "FrameParser",
]
