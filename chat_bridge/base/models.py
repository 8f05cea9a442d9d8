"""
Bridge domain models (DTOs) public surface.

Re-exports the implementations under ``chat_bridge.base.models_parts``.
"""

from .models_parts.message import Message, Role, ROLES
from .models_parts.chat_request import ChatRequest, DEFAULT_MAX_TOKENS
from .models_parts.chat_response import ChatResponse, ResponseMetadata, StreamOutcome

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
