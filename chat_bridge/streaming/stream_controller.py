"""StreamController: one request, opened and decoded behind a cancellable iterator.

Combines ``TransportClient.open`` and ``EventStreamDecoder`` so callers that
only want text increments do not manage the chunk source themselves. The
controller owns its cancellation token, a child of the host token when one is
given: cancelling the host stops every controller, while ``cancel`` stops only
this one. ``cancel`` may be called from another thread during iteration.
"""
from __future__ import annotations

from typing import Iterator, List, Optional

from ..base.cancellation import CancellationToken
from ..base.errors import BridgeError, StreamConsumedError
from ..base.logging import LogContext
from ..base.models import ChatRequest, StreamOutcome
from ..transport import TransportClient
from .decoder import EventStreamDecoder
from .streaming_metrics import StreamMetrics


class StreamController:
    """High-level cancellable iterator over the increments of one request.

    Responsibilities:
      * Open the transport and decode the body lazily on first iteration.
      * Expose ``cancel(reason)`` for cooperative cancellation.
      * Track the terminal outcome and error for post-hoc inspection.
    """

    def __init__(
        self,
        request: ChatRequest,
        transport: Optional[TransportClient] = None,
        token: Optional[CancellationToken] = None,
        *,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._request = request
        self._transport = transport or TransportClient()
        self._token = token.child() if token is not None else CancellationToken()
        self._ctx = ctx or LogContext(model=request.model, endpoint=request.endpoint)
        self._decoder: Optional[EventStreamDecoder] = None
        self._parts: List[str] = []
        self._started = False
        self._outcome: Optional[StreamOutcome] = None
        self._error: Optional[BridgeError] = None

    def __iter__(self) -> Iterator[str]:
        if self._started:
            raise StreamConsumedError("stream controller")
        self._started = True
        return self._run()

    def _run(self) -> Iterator[str]:
        try:
            source = self._transport.open(self._request, self._token)
        except BridgeError as exc:
            self._outcome = StreamOutcome.FAILED
            self._error = exc
            raise
        self._decoder = EventStreamDecoder(source, self._token, ctx=self._ctx)
        try:
            for text in self._decoder:
                self._parts.append(text)
                yield text
        except BridgeError as exc:
            self._error = exc
            raise
        finally:
            self._outcome = self._decoder.outcome

    # API -----------------------------------------------------------------
    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cooperative cancellation; safe after completion."""
        self._token.cancel(reason)

    @property
    def token(self) -> CancellationToken:
        return self._token

    @property
    def finished(self) -> bool:  # noqa: D401 - short property
        """Whether the stream reached a terminal outcome."""
        return self._outcome is not None

    @property
    def outcome(self) -> Optional[StreamOutcome]:
        return self._outcome

    @property
    def error(self) -> Optional[BridgeError]:
        return self._error

    @property
    def metrics(self) -> StreamMetrics:
        return self._decoder.metrics if self._decoder is not None else StreamMetrics()

    @property
    def text(self) -> str:
        """Concatenation of the increments delivered so far."""
        return "".join(self._parts)


__all__ = ["StreamController"]
