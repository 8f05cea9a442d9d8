"""
ChatRequest DTO describing one submitted chat exchange.

A request is immutable once built: messages are held in a tuple and the
dataclass is frozen, so the transport can serialize it without defensive
copies and concurrent bridges never share mutable request state.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from .message import Message

DEFAULT_MAX_TOKENS = 1000


@dataclass(frozen=True)
class ChatRequest:
    """Normalized request sent to the external chat completion backend.

    Attributes:
        endpoint: Full URL of the chat completion endpoint.
        messages: Ordered messages; order is preserved on the wire.
        model: Model identifier forwarded in the body.
        api_key: Optional bearer credential; the ``Authorization`` header is
            only attached when this is non-empty.
        max_tokens: Output-length cap forwarded as ``max_tokens``.
        stream: Whether to request a streamed (``data:`` framed) response.
    """

    endpoint: str
    messages: Tuple[Message, ...]
    model: str
    api_key: Optional[str] = field(default=None, repr=False)
    max_tokens: int = DEFAULT_MAX_TOKENS
    stream: bool = True

    @classmethod
    def build(
        cls,
        *,
        endpoint: str,
        messages: Iterable[Message],
        model: str,
        api_key: Optional[str] = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        stream: bool = True,
    ) -> "ChatRequest":
        """Construct a request from any iterable of messages."""
        return cls(
            endpoint=endpoint,
            messages=tuple(messages),
            model=model,
            api_key=api_key or None,
            max_tokens=max_tokens,
            stream=stream,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body: ``{model, messages, stream?, max_tokens}``.

        ``stream`` is only present for streamed requests, matching what
        OpenAI-compatible backends expect for plain completions.
        """
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
        }
        if self.stream:
            payload["stream"] = True
        payload["max_tokens"] = self.max_tokens
        return payload

    def headers(self) -> Dict[str, str]:
        """Return request headers; ``Authorization`` only when a key is set."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


__all__ = [
    "ChatRequest",
    "DEFAULT_MAX_TOKENS",
]
