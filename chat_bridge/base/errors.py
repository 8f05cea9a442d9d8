"""Unified bridge error taxonomy public surface.

This module re-exports the implementations under
``chat_bridge.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.bridge_error import BridgeError
from .errors_parts.stream_errors import (
    FrameDecodeWarning,
    StreamConnectionError,
    StreamConsumedError,
    StreamTransportError,
    code_for_status,
)
from .errors_parts.classification import classify_exception

__all__ = [
    "ErrorCode",
    "BridgeError",
    "FrameDecodeWarning",
    "StreamConnectionError",
    "StreamConsumedError",
    "StreamTransportError",
    "classify_exception",
    "code_for_status",
]
