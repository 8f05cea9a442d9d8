"""Streaming package: ``data:`` frame parsing and the event-stream decoder."""

from .decoder import EventStreamDecoder, decode
from .frames import (
    DATA_PREFIX,
    SENTINEL,
    DecodeStep,
    DecoderState,
    Error,
    FrameParser,
    Increment,
    Skip,
    Terminate,
    parse_frame,
)
from .stream_controller import StreamController
from .streaming_metrics import StreamMetrics

__all__ = [
    "DATA_PREFIX",
    "SENTINEL",
    "DecodeStep",
    "DecoderState",
    "Error",
    "EventStreamDecoder",
    "FrameParser",
    "Increment",
    "Skip",
    "StreamController",
    "StreamMetrics",
    "Terminate",
    "decode",
    "parse_frame",
]
