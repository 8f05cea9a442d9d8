"""Single-use, cancelable byte-chunk source over a streamed HTTP response.

A ``ChunkSource`` owns exactly one ``httpx.Response`` opened with
``stream=True``. It exposes the body as a forward-only iterator of raw
chunks, checks the cancellation token immediately before every read, and
releases the response exactly once whichever of drain, explicit close,
cancellation or failure happens first.
"""
from __future__ import annotations

import logging
from threading import Lock
from typing import Iterator, Optional

import httpx

from ..base.cancellation import CancellationToken
from ..base.errors import StreamConsumedError, StreamTransportError, classify_exception
from ..base.logging import LogContext, get_logger, normalized_log_event


class ChunkSource:
    """Lazy, single-consumer iterator of raw response chunks.

    Parameters:
        response: Streamed response whose status has already been accepted,
            or ``None`` for an empty source (request cancelled before send).
        cancellation: Optional token polled before each chunk read.
        ctx: Log context of the owning exchange.
        logger: Logger for ``transport.close`` events.
        chunk_size: Optional read size forwarded to ``iter_bytes``.

    Failure modes:
        - A second ``iter()`` raises ``StreamConsumedError``.
        - ``httpx`` transport errors while reading are re-raised as
          ``StreamTransportError`` after the response has been released.
    """

    def __init__(
        self,
        response: Optional[httpx.Response],
        cancellation: Optional[CancellationToken] = None,
        *,
        ctx: Optional[LogContext] = None,
        logger: Optional[logging.Logger] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        self._response = response
        self._cancellation = cancellation
        self._ctx = ctx or LogContext()
        self._logger = logger or get_logger("chat_bridge.transport")
        self._chunk_size = chunk_size
        self._lock = Lock()
        self._started = False
        self._closed = response is None
        self.close_reason: Optional[str] = None if response is not None else "empty"
        self.bytes_read = 0

    @classmethod
    def empty(cls, *, ctx: Optional[LogContext] = None, logger: Optional[logging.Logger] = None) -> "ChunkSource":
        """Return an already-closed source that yields nothing."""
        return cls(None, ctx=ctx, logger=logger)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def status_code(self) -> Optional[int]:
        return self._response.status_code if self._response is not None else None

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers if self._response is not None else httpx.Headers()

    def __iter__(self) -> Iterator[bytes]:
        with self._lock:
            if self._started:
                raise StreamConsumedError("chunk source")
            self._started = True
        return self._iter_chunks()

    def _cancel_requested(self) -> bool:
        return self._cancellation is not None and self._cancellation.cancelled

    def _iter_chunks(self) -> Iterator[bytes]:
        if self._response is None or self._closed:
            return
        chunks = self._response.iter_bytes(self._chunk_size)
        try:
            while True:
                if self._cancel_requested():
                    self.close("cancelled")
                    return
                try:
                    chunk = next(chunks)
                except StopIteration:
                    self.close("drained")
                    return
                except (httpx.TransportError, httpx.StreamError) as exc:
                    # a close from another thread aborts the pending read
                    if self._cancel_requested() or self._closed:
                        self.close("cancelled")
                        return
                    self.close("error")
                    raise StreamTransportError(
                        code=classify_exception(exc),
                        message=str(exc) or exc.__class__.__name__,
                        model=self._ctx.model,
                        raw=exc,
                    ) from exc
                if chunk:
                    self.bytes_read += len(chunk)
                    yield chunk
        finally:
            # consumer stopped iterating early
            self.close("abandoned")

    def close(self, reason: str = "closed") -> None:
        """Release the underlying response; idempotent and thread-safe."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.close_reason = reason
            response = self._response
        if response is not None:
            response.close()
        normalized_log_event(
            self._logger,
            "transport.close",
            self._ctx,
            phase="stream",
            level=logging.DEBUG,
            reason=reason,
            bytes_read=self.bytes_read,
        )

    def __enter__(self) -> "ChunkSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["ChunkSource"]
