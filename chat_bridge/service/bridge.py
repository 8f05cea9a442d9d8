"""Chat bridge service: one prompt in, rendered fragments out.

Purpose
-------
Glue between a host surface (``ResponseSink``) and the core transport/decoder.
``stream_response`` forwards each decoded increment to the sink as it
arrives; ``handle_chat`` resolves configuration, builds the message list for a
command and validates the request before calling it.

Fallback & Error Semantics
--------------------------
- A ``BridgeError`` (rejection, transport failure, invalid endpoint) is
  rendered once as ``Failed to get response from AI service: <message>`` and
  reported through the returned ``ChatResponse`` (outcome ``FAILED``).
- Cancellation and clean ends render nothing extra.
- A missing endpoint renders a configuration hint and performs no network I/O.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, Optional

from ..base.cancellation import CancellationToken
from ..base.dto import ChatRequestDTO
from ..base.errors import BridgeError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import ChatRequest, ChatResponse, ResponseMetadata, StreamOutcome
from ..config import get_bridge_config
from ..config.defaults import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    ERROR_NOTICE_PREFIX,
    MISSING_ENDPOINT_MESSAGE,
    PROGRESS_MESSAGE,
)
from ..streaming import EventStreamDecoder
from ..transport import TransportClient
from .prompts import Reference, build_messages
from .sink import ResponseSink

_LOGGER_NAME = "chat_bridge.service"


def _failed(request: ChatRequest, sink: ResponseSink, error: BridgeError, text: str, latency_ms: float) -> ChatResponse:
    sink.markdown(f"{ERROR_NOTICE_PREFIX}{error.message}")
    return ChatResponse(
        text=text,
        meta=ResponseMetadata(
            model=request.model,
            outcome=StreamOutcome.FAILED,
            latency_ms=latency_ms,
            extra={"error_code": error.code.value, "error": error.message},
        ),
    )


def _log_end(logger: logging.Logger, ctx: LogContext, response: ChatResponse, emitted: int) -> None:
    outcome = response.meta.outcome
    normalized_log_event(
        logger,
        "bridge.end",
        ctx,
        phase="finalize",
        emitted=emitted,
        error_code=response.meta.extra.get("error_code"),
        level=logging.ERROR if outcome is StreamOutcome.FAILED else logging.INFO,
        outcome=outcome.value if outcome is not None else None,
        latency_ms=response.meta.latency_ms,
    )


def stream_response(
    request: ChatRequest,
    sink: ResponseSink,
    cancellation: Optional[CancellationToken] = None,
    *,
    transport: Optional[TransportClient] = None,
) -> ChatResponse:
    """Stream one request into ``sink`` and return a summary response.

    Parameters:
        request: The validated request.
        sink: Receives one progress message, then each fragment in order.
        cancellation: Token polled before every chunk read.
        transport: Optional transport; defaults to the pooled client.

    Returns:
        ``ChatResponse`` whose ``text`` is the concatenation of the fragments
        delivered and whose ``meta.outcome`` records how the stream ended.
    """
    logger = get_logger(_LOGGER_NAME)
    transport = transport or TransportClient()
    ctx = LogContext(model=request.model, endpoint=request.endpoint)
    normalized_log_event(logger, "bridge.start", ctx, phase="open", emitted=0, stream=True)
    sink.progress(PROGRESS_MESSAGE)

    t0 = time.perf_counter()
    parts = []
    decoder: Optional[EventStreamDecoder] = None
    try:
        source = transport.open(request, cancellation)
        decoder = EventStreamDecoder(source, cancellation, ctx=ctx)
        for fragment in decoder:
            parts.append(fragment)
            sink.markdown(fragment)
    except BridgeError as exc:
        response = _failed(request, sink, exc, "".join(parts), (time.perf_counter() - t0) * 1000.0)
        _log_end(logger, ctx, response, len(parts))
        return response

    response = ChatResponse(
        text="".join(parts),
        meta=ResponseMetadata(
            model=request.model,
            outcome=decoder.outcome,
            latency_ms=(time.perf_counter() - t0) * 1000.0,
            extra=decoder.metrics.to_dict(),
        ),
    )
    _log_end(logger, ctx, response, len(parts))
    return response


def complete_response(
    request: ChatRequest,
    sink: ResponseSink,
    cancellation: Optional[CancellationToken] = None,
    *,
    transport: Optional[TransportClient] = None,
) -> ChatResponse:
    """Non-streaming fallback: render the whole answer as a single fragment."""
    logger = get_logger(_LOGGER_NAME)
    transport = transport or TransportClient()
    ctx = LogContext(model=request.model, endpoint=request.endpoint)
    normalized_log_event(logger, "bridge.start", ctx, phase="open", emitted=0, stream=False)
    sink.progress(PROGRESS_MESSAGE)

    t0 = time.perf_counter()
    try:
        text = transport.complete(request, cancellation)
    except BridgeError as exc:
        response = _failed(request, sink, exc, "", (time.perf_counter() - t0) * 1000.0)
        _log_end(logger, ctx, response, 0)
        return response

    cancelled = cancellation is not None and cancellation.cancelled and not text
    if text:
        sink.markdown(text)
    response = ChatResponse(
        text=text,
        meta=ResponseMetadata(
            model=request.model,
            outcome=StreamOutcome.CANCELLED if cancelled else None,
            latency_ms=(time.perf_counter() - t0) * 1000.0,
        ),
    )
    _log_end(logger, ctx, response, 1 if text else 0)
    return response


def build_request(
    prompt: str,
    config: Dict[str, Any],
    *,
    command: Optional[str] = None,
    references: Iterable[Reference] = (),
    stream: bool = True,
) -> ChatRequest:
    """Validate and build the request for ``prompt`` under ``config``.

    Raises:
        pydantic.ValidationError: Empty prompt, empty endpoint or bad limits.
        ValueError: Unknown command.
    """
    messages = build_messages(command, prompt, references)
    dto = ChatRequestDTO(
        endpoint=config.get("endpoint") or "",
        messages=[m.to_dict() for m in messages],
        model=config.get("model") or DEFAULT_MODEL,
        api_key=config.get("api_key"),
        max_tokens=config.get("max_tokens") or DEFAULT_MAX_TOKENS,
        stream=stream,
    )
    return dto.to_request()


def handle_chat(
    prompt: str,
    sink: ResponseSink,
    cancellation: Optional[CancellationToken] = None,
    *,
    command: Optional[str] = None,
    references: Iterable[Reference] = (),
    config: Optional[Dict[str, Any]] = None,
    transport: Optional[TransportClient] = None,
    stream: bool = True,
) -> Optional[ChatResponse]:
    """Answer one chat prompt through ``sink``.

    ``config`` is a resolved configuration mapping; when ``None`` it is read
    with ``get_bridge_config()``. Returns ``None`` when no endpoint is
    configured (the hint has been rendered and no request was sent).
    """
    cfg = config if config is not None else get_bridge_config()
    if not str(cfg.get("endpoint") or "").strip():
        sink.markdown(MISSING_ENDPOINT_MESSAGE)
        return None
    request = build_request(prompt, cfg, command=command, references=references, stream=stream)
    if stream:
        return stream_response(request, sink, cancellation, transport=transport)
    return complete_response(request, sink, cancellation, transport=transport)


__all__ = [
    "build_request",
    "complete_response",
    "handle_chat",
    "stream_response",
]
