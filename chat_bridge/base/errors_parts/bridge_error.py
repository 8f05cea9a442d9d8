"""
Structured bridge error exception type.

Root of the failure taxonomy: every error the transport or decoder surfaces to
a caller is a `BridgeError` carrying a normalized `ErrorCode`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class BridgeError(Exception):
    """Represents a structured bridge failure with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging and for the
            error notice rendered to the user.
        model: Optional model identifier associated with the failure.
        retryable: Hint for caller retry policy; the bridge itself never retries.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code.value}: {self.message}"


__all__ = ["BridgeError"]
