"""Streaming metrics data structures."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Counters collected by one decoder run.

    Fields:
      emitted: increments delivered to the consumer
      chunks: raw chunks read from the source
      skipped_frames: keep-alive, non-data and empty-delta lines
      malformed_frames: ``data:`` lines whose payload failed to decode
      time_to_first_token_ms: delay from stream start to first increment
      total_duration_ms: delay from stream start to terminal transition
    """

    emitted: int = 0
    chunks: int = 0
    skipped_frames: int = 0
    malformed_frames: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["StreamMetrics"]
