"""chat_bridge: stream chat completions from an OpenAI-compatible endpoint.

Two core pieces:

- ``TransportClient`` sends the request and returns a cancelable, single-use
  ``ChunkSource`` of raw body chunks.
- ``decode`` turns a chunk source into an iterator of text increments,
  stopping at the ``[DONE]`` sentinel, peer close, failure or cancellation.
"""

from .base import (
    BridgeError,
    CancellationToken,
    ChatRequest,
    ChatResponse,
    ErrorCode,
    Message,
    StreamConnectionError,
    StreamConsumedError,
    StreamOutcome,
    StreamTransportError,
)
from .streaming import EventStreamDecoder, StreamController, decode
from .transport import ChunkSource, TransportClient

__version__ = "0.1.0"

__all__ = [
    "BridgeError",
    "CancellationToken",
    "ChatRequest",
    "ChatResponse",
    "ChunkSource",
    "ErrorCode",
    "EventStreamDecoder",
    "Message",
    "StreamConnectionError",
    "StreamConsumedError",
    "StreamController",
    "StreamOutcome",
    "StreamTransportError",
    "TransportClient",
    "decode",
    "__version__",
]
