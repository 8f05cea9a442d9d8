"""
Bridge Base Package

Shared, transport-agnostic building blocks used by the transport client, the
event-stream decoder and the service layer:

- Cancellation: cooperative, pollable tokens
- Errors: normalized failure taxonomy rooted in ``BridgeError``
- Models (DTOs): immutable request, response and outcome types
- Logging: structured JSON event logging
- Timeouts and pooled HTTP clients
"""

from .cancellation import CancellationToken
from .errors import (
    BridgeError,
    ErrorCode,
    FrameDecodeWarning,
    StreamConnectionError,
    StreamConsumedError,
    StreamTransportError,
    classify_exception,
)
from .models import (
    ChatRequest,
    ChatResponse,
    Message,
    ResponseMetadata,
    Role,
    StreamOutcome,
)
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    "CancellationToken",
    "BridgeError",
    "ErrorCode",
    "FrameDecodeWarning",
    "StreamConnectionError",
    "StreamConsumedError",
    "StreamTransportError",
    "classify_exception",
    "ChatRequest",
    "ChatResponse",
    "Message",
    "ResponseMetadata",
    "Role",
    "StreamOutcome",
    "TimeoutConfig",
    "get_timeout_config",
]
