"""Model parts package; import from ``chat_bridge.base.models`` instead."""

from .message import Message, Role, ROLES
from .chat_request import ChatRequest, DEFAULT_MAX_TOKENS
from .chat_response import ChatResponse, ResponseMetadata, StreamOutcome

__all__ = [
    "Message",
    "Role",
    "ROLES",
    "ChatRequest",
    "DEFAULT_MAX_TOKENS",
    "ChatResponse",
    "ResponseMetadata",
    "StreamOutcome",
]
