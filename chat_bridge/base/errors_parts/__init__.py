"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chat_bridge.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .bridge_error import BridgeError
from .stream_errors import (
    FrameDecodeWarning,
    StreamConnectionError,
    StreamConsumedError,
    StreamTransportError,
)
from .classification import classify_exception

__all__ = [
    "ErrorCode",
    "BridgeError",
    "FrameDecodeWarning",
    "StreamConnectionError",
    "StreamConsumedError",
    "StreamTransportError",
    "classify_exception",
]
