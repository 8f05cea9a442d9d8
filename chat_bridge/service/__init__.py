"""Service layer: host-facing chat handling built on the transport and decoder.

Nothing under ``chat_bridge.base``, ``chat_bridge.transport`` or
``chat_bridge.streaming`` imports from here.
"""

from .bridge import build_request, complete_response, handle_chat, stream_response
from .prompts import Followup, build_messages, followups
from .sink import CollectingSink, ResponseSink, TextStreamSink

__all__ = [
    "build_request",
    "complete_response",
    "handle_chat",
    "stream_response",
    "Followup",
    "build_messages",
    "followups",
    "CollectingSink",
    "ResponseSink",
    "TextStreamSink",
]
