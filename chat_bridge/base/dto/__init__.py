"""DTO validation package for the bridge."""

from .chat import Role, MessageDTO, ChatRequestDTO

__all__ = [
    "Role",
    "MessageDTO",
    "ChatRequestDTO",
]
