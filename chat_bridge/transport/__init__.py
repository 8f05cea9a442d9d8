"""Transport package: outbound HTTP and cancelable chunk sources."""

from .chunk_source import ChunkSource
from .client import NO_RESPONSE_TEXT, TransportClient

__all__ = ["ChunkSource", "TransportClient", "NO_RESPONSE_TEXT"]
