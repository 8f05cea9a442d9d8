"""
Response DTOs and the stream outcome enumeration.

`StreamOutcome` records which terminal condition ended a stream. `ChatResponse`
is returned by the non-streaming fallback and as the summary of a streamed
exchange.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class StreamOutcome(str, Enum):
    """How a stream terminated; only ``FAILED`` is an error outcome."""

    SENTINEL = "sentinel"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_failure(self) -> bool:
        return self is StreamOutcome.FAILED


@dataclass
class ResponseMetadata:
    """Metadata about a completed exchange.

    Attributes:
        model: Model identifier used for the request.
        outcome: Terminal outcome; ``None`` for non-streamed completions.
        latency_ms: Wall clock duration of the exchange.
        extra: Error details or stream metrics.
    """

    model: str
    outcome: Optional[StreamOutcome] = None
    latency_ms: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ChatResponse:
    """Full response text plus metadata."""

    text: Optional[str]
    meta: ResponseMetadata


__all__ = [
    "StreamOutcome",
    "ResponseMetadata",
    "ChatResponse",
]
