"""Shared builders for wire frames, fake chunk sources and mocked transports."""

from __future__ import annotations

import json
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

import httpx

from chat_bridge.base.models import ChatRequest, Message
from chat_bridge.transport import TransportClient

ENDPOINT = "http://ai.local/v1/chat/completions"


def delta_frame(text: str) -> bytes:
    """One ``data:`` line carrying ``text`` as a delta (raw UTF-8, not escaped)."""
    payload = {"choices": [{"delta": {"content": text}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n".encode("utf-8")


DONE = b"data: [DONE]\n"


def sse_body(*texts: str, done: bool = True) -> bytes:
    body = b"".join(delta_frame(t) for t in texts)
    return body + DONE if done else body


def split_at(body: bytes, positions: Sequence[int]) -> List[bytes]:
    """Split ``body`` at sorted byte offsets into consecutive chunks."""
    chunks = []
    start = 0
    for pos in positions:
        chunks.append(body[start:pos])
        start = pos
    chunks.append(body[start:])
    return chunks


class FakeSource:
    """Iterable chunk source that records reads and closure.

    ``fail_at`` raises ``error`` when the chunk with that index would be read.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        *,
        fail_at: Optional[int] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self._chunks = list(chunks)
        self._fail_at = fail_at
        self._error = error
        self.pulled = 0
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        for index, chunk in enumerate(self._chunks):
            if self._fail_at is not None and index == self._fail_at:
                raise self._error  # type: ignore[misc]
            self.pulled += 1
            yield chunk
        if self._fail_at is not None and self._fail_at >= len(self._chunks):
            raise self._error  # type: ignore[misc]

    def close(self) -> None:
        self.closed = True


def make_request(
    *,
    endpoint: str = ENDPOINT,
    api_key: Optional[str] = None,
    model: str = "gpt-3.5-turbo",
    prompt: str = "Hello",
    max_tokens: int = 1000,
) -> ChatRequest:
    return ChatRequest.build(
        endpoint=endpoint,
        messages=[Message(role="user", content=prompt)],
        model=model,
        api_key=api_key,
        max_tokens=max_tokens,
    )


class RecordingHandler:
    """``httpx.MockTransport`` handler that records requests.

    ``respond`` builds the response for each request.
    """

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self._respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    def body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


def streaming_response(chunks: Iterable[bytes], status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def _respond(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=iter(list(chunks)), headers={"content-type": "text/event-stream"})

    return _respond


def mock_transport(handler: Callable[[httpx.Request], httpx.Response]) -> TransportClient:
    """A ``TransportClient`` whose HTTP goes through ``httpx.MockTransport``."""
    return TransportClient(httpx.Client(transport=httpx.MockTransport(handler)))
