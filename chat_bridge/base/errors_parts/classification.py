"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements httpx exception mapping, HTTP status extraction and a small
message-based heuristic fallback.
"""
from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from .error_code import ErrorCode
from .bridge_error import BridgeError
from .stream_errors import code_for_status


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def _classify_httpx(exc: Exception) -> Optional[ErrorCode]:
    """Map ``httpx`` transport exceptions to codes; ``None`` for other types."""
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.ConnectError):
        return ErrorCode.UNAVAILABLE
    if isinstance(exc, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)):
        return ErrorCode.TRANSIENT
    if isinstance(exc, httpx.UnsupportedProtocol):
        return ErrorCode.VALIDATION
    return None


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without richer structure."""
    pattern_groups = (
        (ErrorCode.TIMEOUT, ("timeout", "timed out")),
        (ErrorCode.AUTH, ("unauthorized", "forbidden", "api key")),
        (ErrorCode.NOT_FOUND, ("not found",)),
        (ErrorCode.UNAVAILABLE, ("unavailable", "connection refused")),
        (ErrorCode.VALIDATION, ("invalid", "malformed")),
    )
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, patterns in pattern_groups:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. BridgeError passthrough.
        2. Timeout exceptions (sync/async).
        3. httpx transport exception types.
        4. HTTP status mapping.
        5. Substring heuristics.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, BridgeError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    code = _classify_httpx(exc)
    if code is not None:
        return code
    status = _extract_status(exc)
    if status is not None:
        return code_for_status(status)
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
    "_extract_status",
]
