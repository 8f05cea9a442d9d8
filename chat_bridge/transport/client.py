"""Transport client for OpenAI-compatible chat completion endpoints.

Summary:
- ``open`` issues one streaming POST and returns a cancelable ``ChunkSource``
- ``complete`` issues one non-streaming POST and returns the message text

Both paths reject non-success statuses with ``StreamConnectionError`` before
any content is produced, and normalize transport failures into
``StreamTransportError``. No retries are performed; retry policy belongs to
the caller.

This module orchestrates I/O only; framing and decoding live in
``chat_bridge.streaming``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..base.cancellation import CancellationToken
from ..base.errors import (
    BridgeError,
    ErrorCode,
    StreamConnectionError,
    StreamTransportError,
    classify_exception,
)
from ..base.http import get_httpx_client
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import ChatRequest
from .chunk_source import ChunkSource

NO_RESPONSE_TEXT = "No response received"


class TransportClient:
    """Performs outbound HTTP for one or more independent exchanges.

    Parameters:
        client: Optional ``httpx.Client`` to use instead of the shared pool
            (tests inject one backed by ``httpx.MockTransport``).
        logger: Optional logger; defaults to ``chat_bridge.transport``.
        chunk_size: Optional read size for streamed bodies.

    The instance holds no per-request state, so one client may serve many
    concurrent bridges; each ``open`` call returns its own ``ChunkSource``
    that exclusively owns its response.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        logger: Optional[logging.Logger] = None,
        chunk_size: Optional[int] = None,
    ) -> None:
        self._client = client
        self._logger = logger or get_logger("chat_bridge.transport")
        self._chunk_size = chunk_size

    def _http(self, purpose: str) -> httpx.Client:
        return self._client if self._client is not None else get_httpx_client(purpose)

    @staticmethod
    def _require_endpoint(request: ChatRequest) -> None:
        if not request.endpoint or not request.endpoint.strip():
            raise BridgeError(
                code=ErrorCode.VALIDATION,
                message="AI server endpoint is not configured",
                model=request.model,
            )

    def _transport_error(self, exc: Exception, request: ChatRequest, ctx: LogContext) -> StreamTransportError:
        code = classify_exception(exc)
        normalized_log_event(
            self._logger,
            "transport.error",
            ctx,
            phase="open",
            error_code=code.value,
            level=logging.ERROR,
            error=str(exc) or exc.__class__.__name__,
        )
        return StreamTransportError(
            code=code,
            message=str(exc) or exc.__class__.__name__,
            model=request.model,
            retryable=code in (ErrorCode.TRANSIENT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE),
            raw=exc,
        )

    def _reject(self, response: httpx.Response, request: ChatRequest, ctx: LogContext) -> StreamConnectionError:
        error = StreamConnectionError(response.status_code, response.reason_phrase, model=request.model)
        normalized_log_event(
            self._logger,
            "transport.rejected",
            ctx,
            phase="open",
            emitted=0,
            error_code=error.code.value,
            level=logging.WARNING,
            status=error.status,
            status_text=error.status_text,
        )
        return error

    def _build(self, client: httpx.Client, request: ChatRequest, payload: Dict[str, Any]) -> httpx.Request:
        try:
            return client.build_request("POST", request.endpoint, json=payload, headers=request.headers())
        except httpx.InvalidURL as exc:
            raise BridgeError(
                code=ErrorCode.VALIDATION,
                message=f"invalid endpoint URL: {exc}",
                model=request.model,
                raw=exc,
            ) from exc

    def open(self, request: ChatRequest, cancellation: Optional[CancellationToken] = None) -> ChunkSource:
        """Open a streaming chat completion and return its chunk source.

        Parameters:
            request: The immutable request; its endpoint must be non-empty.
            cancellation: Token polled before sending and before each read.

        Returns:
            A ``ChunkSource`` holding the open response. When the token is
            already cancelled, an empty closed source is returned without any
            network I/O.

        Raises:
            BridgeError: ``VALIDATION`` for an empty or malformed endpoint.
            StreamConnectionError: Non-success status (response released).
            StreamTransportError: Connection-level failure while sending.
        """
        self._require_endpoint(request)
        ctx = LogContext(model=request.model, endpoint=request.endpoint)
        if cancellation is not None and cancellation.cancelled:
            normalized_log_event(self._logger, "transport.skipped", ctx, phase="open", emitted=0, reason="cancelled")
            return ChunkSource.empty(ctx=ctx, logger=self._logger)

        client = self._http("stream")
        payload = request.to_payload()
        payload["stream"] = True
        http_request = self._build(client, request, payload)
        try:
            response = client.send(http_request, stream=True)
        except httpx.TransportError as exc:
            raise self._transport_error(exc, request, ctx) from exc

        if not response.is_success:
            response.close()
            raise self._reject(response, request, ctx)

        ctx.request_id = response.headers.get("x-request-id")
        normalized_log_event(
            self._logger,
            "transport.open",
            ctx,
            phase="open",
            emitted=0,
            status=response.status_code,
            messages=len(request.messages),
            max_tokens=request.max_tokens,
        )
        return ChunkSource(response, cancellation, ctx=ctx, logger=self._logger, chunk_size=self._chunk_size)

    def complete(self, request: ChatRequest, cancellation: Optional[CancellationToken] = None) -> str:
        """Perform a non-streaming chat completion and return its text.

        Returns ``choices[0].message.content`` or ``"No response received"``
        when the backend answered without content. A token cancelled before
        the call returns an empty string without network I/O.

        Raises:
            BridgeError: Empty endpoint, or a body that is not valid JSON.
            StreamConnectionError: Non-success status.
            StreamTransportError: Connection-level failure.
        """
        self._require_endpoint(request)
        ctx = LogContext(model=request.model, endpoint=request.endpoint)
        if cancellation is not None and cancellation.cancelled:
            return ""

        client = self._http("complete")
        payload = request.to_payload()
        payload.pop("stream", None)
        http_request = self._build(client, request, payload)
        try:
            response = client.send(http_request)
        except httpx.TransportError as exc:
            raise self._transport_error(exc, request, ctx) from exc

        if not response.is_success:
            raise self._reject(response, request, ctx)
        try:
            data = response.json()
        except ValueError as exc:
            raise BridgeError(
                code=ErrorCode.SERVER_ERROR,
                message="AI service returned a body that is not valid JSON",
                model=request.model,
                raw=exc,
            ) from exc

        normalized_log_event(self._logger, "transport.complete", ctx, phase="finalize", status=response.status_code)
        return _message_content(data) or NO_RESPONSE_TEXT


def _message_content(data: Any) -> Optional[str]:
    """Extract ``choices[0].message.content`` leniently; ``None`` if absent."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


__all__ = ["TransportClient", "NO_RESPONSE_TEXT"]
