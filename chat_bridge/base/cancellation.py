"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose the cancellation constructs used by the transport and decoder via the
canonical ``chat_bridge.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` is a pollable flag passed by value into
	``TransportClient.open`` and ``decode``; both check it immediately before
	each chunk read.
- Observed cancellation is a normal stream outcome, never an exception.
"""

from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken"]
