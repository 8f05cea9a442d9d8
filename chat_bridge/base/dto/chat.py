"""
Pydantic DTOs and validators for inbound chat requests.

Purpose
-------
Validate loosely-typed payloads coming from a host (JSON settings, CLI input,
an HTTP handler) before they become a frozen :class:`ChatRequest`. Enforces
roles, non-empty content, a non-empty endpoint and a positive output cap.

Fallback semantics: none. Validation either succeeds or raises
``pydantic.ValidationError``; callers decide how to report it.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models import ChatRequest, DEFAULT_MAX_TOKENS, Message


Role = Literal["system", "user", "assistant"]


class MessageDTO(BaseModel):
    """A role-tagged message with validated content.

    Rules:
        - ``role`` must be one of ``Role``.
        - ``user`` messages must carry non-blank content; system and
          assistant messages may be empty.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    @model_validator(mode="after")
    def _validate_content(self) -> "MessageDTO":
        if self.role == "user" and not self.content.strip():
            raise ValueError("user message content must be non-empty")
        return self

    def to_message(self) -> Message:
        return Message(role=self.role, content=self.content)


class ChatRequestDTO(BaseModel):
    """Validated inbound chat request.

    Parameters:
        endpoint: Chat completion URL (non-blank after stripping).
        messages: Non-empty ordered list of messages; the first one must come
            from ``system`` or ``user``.
        model: Model identifier (non-empty).
        api_key: Optional credential; blank strings are treated as absent.
        max_tokens: Positive output cap.
        stream: Whether to request a streamed response.

    Raises:
        ValidationError: On invalid roles, empty content or out-of-range params.
    """

    endpoint: str
    messages: List[MessageDTO] = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    api_key: Optional[str] = None
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    stream: bool = True

    @field_validator("endpoint")
    @classmethod
    def _endpoint_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("endpoint must be non-empty")
        return value

    @field_validator("api_key")
    @classmethod
    def _blank_key_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() or None if value is not None else None

    @model_validator(mode="after")
    def _validate_sequence(self) -> "ChatRequestDTO":
        if self.messages[0].role not in ("system", "user"):
            raise ValueError("first message must be from 'system' or 'user'")
        return self

    def to_request(self) -> ChatRequest:
        """Convert into the immutable request consumed by the transport."""
        return ChatRequest.build(
            endpoint=self.endpoint,
            messages=[m.to_message() for m in self.messages],
            model=self.model,
            api_key=self.api_key,
            max_tokens=self.max_tokens,
            stream=self.stream,
        )


__all__ = [
    "Role",
    "MessageDTO",
    "ChatRequestDTO",
]
