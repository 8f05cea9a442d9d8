"""Event-stream decoder: raw chunks in, content increments out.

``EventStreamDecoder`` drives a ``FrameParser`` over a chunk source and yields
text increments lazily, in wire order. It stops at the first of:

- the ``[DONE]`` sentinel (``StreamOutcome.SENTINEL``); remaining chunks are
  never read,
- source exhaustion (``StreamOutcome.EXHAUSTED``), logged as
  ``stream.peer_closed`` so it cannot be confused with a sentinel end,
- cancellation observed before a read (``StreamOutcome.CANCELLED``); not an
  error, nothing is raised,
- a failure of the source (``StreamOutcome.FAILED``); a ``BridgeError`` is
  re-raised as is and anything else is wrapped in ``StreamTransportError``,
  after the increments already delivered,
- the consumer closing the iterator early (``StreamOutcome.CANCELLED`` with
  reason ``"consumer closed"``).

In every case the source is released before the iterator finishes.
"""
from __future__ import annotations

import logging
import time
from contextlib import ExitStack, suppress
from typing import Iterable, Iterator, Optional, Union

import httpx

from ..base.cancellation import CancellationToken
from ..base.errors import (
    BridgeError,
    StreamConsumedError,
    StreamTransportError,
    classify_exception,
)
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import StreamOutcome
from .frames import DecodeStep, Error, FrameParser, Increment, Skip, Terminate
from .streaming_metrics import StreamMetrics


def register_stream_cleanup(stream: object, stack: ExitStack) -> None:
    """Register a best-effort ``close`` callback for a chunk source."""
    close_fn = getattr(stream, "close", None)
    if callable(close_fn):
        def _safe_close() -> None:
            # release must never mask the stream's own outcome
            with suppress(Exception):
                close_fn()
        stack.callback(_safe_close)


class EventStreamDecoder:
    """Lazy, single-use iterator of content increments.

    Parameters:
        source: Iterable of raw byte chunks, typically a ``ChunkSource``.
        cancellation: Token polled immediately before each chunk read. A
            cancel observed while a chunk is being parsed takes effect at the
            next read, so that chunk's increments are still delivered.
        ctx: Log context of the exchange.
        logger: Logger for ``stream.*`` events.

    Attributes:
        outcome: ``StreamOutcome`` once terminated, else ``None``.
        error: The ``BridgeError`` that ended a failed stream.
        metrics: ``StreamMetrics`` for this run.
    """

    def __init__(
        self,
        source: Iterable[bytes],
        cancellation: Optional[CancellationToken] = None,
        *,
        ctx: Optional[LogContext] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._source = source
        self._cancellation = cancellation
        self._ctx = ctx or LogContext()
        self._logger = logger or get_logger("chat_bridge.streaming")
        self._parser = FrameParser()
        self._started = False
        self._t0 = 0.0
        self.outcome: Optional[StreamOutcome] = None
        self.error: Optional[BridgeError] = None
        self.metrics = StreamMetrics()

    @property
    def parser(self) -> FrameParser:
        return self._parser

    def __iter__(self) -> Iterator[str]:
        if self._started:
            raise StreamConsumedError("event stream")
        self._started = True
        return self._run()

    # Orchestration ---------------------------------------------------------
    def _run(self) -> Iterator[str]:
        self._t0 = time.perf_counter()
        normalized_log_event(self._logger, "stream.start", self._ctx, phase="stream", emitted=0, level=logging.DEBUG)
        with ExitStack() as stack:
            register_stream_cleanup(self._source, stack)
            try:
                chunks = iter(self._source)
            except BridgeError as exc:
                self._finish(StreamOutcome.FAILED, exc)
                raise
            register_stream_cleanup(chunks, stack)
            try:
                for text in self._loop(chunks):
                    yield text
            except GeneratorExit:
                self._finish(StreamOutcome.CANCELLED, reason="consumer closed")
                raise
            except BridgeError as exc:
                self._finish(StreamOutcome.FAILED, exc)
                raise
            except Exception as exc:
                error = self._wrap(exc)
                self._finish(StreamOutcome.FAILED, error)
                raise error from exc
            finally:
                if self.outcome is None:
                    # interrupted by a BaseException such as KeyboardInterrupt
                    self._finish(StreamOutcome.CANCELLED, reason="interrupted")

    def _loop(self, chunks: Iterator[bytes]) -> Iterator[str]:
        while True:
            if self._cancel_requested():
                self._finish(StreamOutcome.CANCELLED)
                return
            read = self._next_chunk(chunks)
            if isinstance(read, Error):
                self._finish(StreamOutcome.FAILED, read.error)
                raise read.error
            if read is None:
                if self._cancel_requested():
                    self._finish(StreamOutcome.CANCELLED)
                    return
                for text in self._apply(self._parser.finish()):
                    yield text
                if self.outcome is None:
                    self._finish(StreamOutcome.EXHAUSTED)
                return
            self.metrics.chunks += 1
            for text in self._apply(self._parser.feed(read)):
                yield text
            if self.outcome is not None:
                return

    def _cancel_requested(self) -> bool:
        return self._cancellation is not None and self._cancellation.cancelled

    def _next_chunk(self, chunks: Iterator[bytes]) -> Union[bytes, None, Error]:
        """Read one chunk; exhaustion is ``None`` and failures an ``Error`` step."""
        try:
            return next(chunks)
        except StopIteration:
            return None
        except BridgeError as exc:
            return Error(exc)
        except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
            return Error(self._wrap(exc))

    def _wrap(self, exc: Exception) -> StreamTransportError:
        return StreamTransportError(
            code=classify_exception(exc),
            message=str(exc) or exc.__class__.__name__,
            model=self._ctx.model,
            raw=exc,
        )

    def _apply(self, steps: Iterable[DecodeStep]) -> Iterator[str]:
        """Account for each step and yield the text of increments, in order."""
        for step in steps:
            if isinstance(step, Increment):
                if self.metrics.emitted == 0:
                    self.metrics.time_to_first_token_ms = (time.perf_counter() - self._t0) * 1000.0
                self.metrics.emitted += 1
                yield step.text
            elif isinstance(step, Skip):
                self._record_skip(step)
            elif isinstance(step, Terminate):
                self._finish(StreamOutcome.SENTINEL)
                return

    def _record_skip(self, step: Skip) -> None:
        if step.warning is None:
            self.metrics.skipped_frames += 1
            return
        self.metrics.malformed_frames += 1
        normalized_log_event(
            self._logger,
            "stream.decode_warning",
            self._ctx,
            phase="stream",
            emitted=self.metrics.emitted,
            level=logging.WARNING,
            detail=step.warning.detail,
            payload_len=len(step.warning.payload),
        )

    def _finish(self, outcome: StreamOutcome, error: Optional[BridgeError] = None, *, reason: Optional[str] = None) -> None:
        """Record the terminal transition exactly once and log it."""
        if self.outcome is not None:
            return
        self.outcome = outcome
        self.error = error
        self._parser.terminate()
        self.metrics.total_duration_ms = (time.perf_counter() - self._t0) * 1000.0
        event = {
            StreamOutcome.SENTINEL: "stream.sentinel",
            StreamOutcome.EXHAUSTED: "stream.peer_closed",
            StreamOutcome.CANCELLED: "stream.cancelled",
            StreamOutcome.FAILED: "stream.error",
        }[outcome]
        if reason is None and outcome is StreamOutcome.CANCELLED and self._cancellation is not None:
            reason = self._cancellation.reason
        normalized_log_event(
            self._logger,
            event,
            self._ctx,
            phase="finalize",
            emitted=self.metrics.emitted,
            error_code=error.code.value if error is not None else None,
            level=logging.ERROR if error is not None else logging.INFO,
            outcome=outcome.value,
            reason=reason,
            error=error.message if error is not None else None,
            chunks=self.metrics.chunks,
            malformed_frames=self.metrics.malformed_frames,
            time_to_first_token_ms=self.metrics.time_to_first_token_ms,
            total_duration_ms=self.metrics.total_duration_ms,
        )


def decode(
    chunk_source: Iterable[bytes],
    cancellation: Optional[CancellationToken] = None,
    *,
    ctx: Optional[LogContext] = None,
    logger: Optional[logging.Logger] = None,
) -> EventStreamDecoder:
    """Wrap ``chunk_source`` in a single-use decoder yielding increments."""
    return EventStreamDecoder(chunk_source, cancellation, ctx=ctx, logger=logger)


__all__ = ["EventStreamDecoder", "decode", "register_stream_cleanup"]
