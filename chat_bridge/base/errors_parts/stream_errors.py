"""
Concrete failure types raised by the transport client and stream decoder.

- ``StreamConnectionError``: the backend rejected the request (non-2xx status)
  before any chunk was produced.
- ``StreamConsumedError``: a single-use stream was traversed twice.
- ``StreamTransportError``: network I/O failed while connecting or mid-stream.
- ``FrameDecodeWarning``: one malformed frame; attached to the decoder's skip
  step and logged, never raised.
"""
from __future__ import annotations

from typing import Optional

from .bridge_error import BridgeError
from .error_code import ErrorCode

_STATUS_CODES = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def code_for_status(status: int) -> ErrorCode:
    """Map an HTTP status to an :class:`ErrorCode` (5xx fallback: server error)."""
    if status in _STATUS_CODES:
        return _STATUS_CODES[status]
    return ErrorCode.SERVER_ERROR if status >= 500 else ErrorCode.UNKNOWN


class StreamConnectionError(BridgeError):
    """The backend answered with a non-success status before streaming began."""

    def __init__(self, status: int, status_text: str, *, model: Optional[str] = None) -> None:
        code = code_for_status(status)
        super().__init__(
            code=code,
            message=f"AI service returned {status}: {status_text}",
            model=model,
            retryable=code in (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE),
        )
        self.status = status
        self.status_text = status_text

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"StreamConnectionError(status={self.status}, status_text={self.status_text!r})"


class StreamConsumedError(BridgeError):
    """A chunk source or decoder was iterated a second time."""

    def __init__(self, what: str = "stream") -> None:
        super().__init__(code=ErrorCode.INTERNAL, message=f"{what} has already been consumed")


class StreamTransportError(BridgeError):
    """Network I/O failure while connecting or while reading the body."""


class FrameDecodeWarning(UserWarning):
    """A single ``data:`` frame whose payload could not be decoded."""

    def __init__(self, payload: str, detail: str) -> None:
        super().__init__(f"malformed frame: {detail}")
        self.payload = payload
        self.detail = detail


__all__ = [
    "StreamConnectionError",
    "StreamConsumedError",
    "StreamTransportError",
    "FrameDecodeWarning",
    "code_for_status",
]
