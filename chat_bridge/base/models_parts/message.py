"""
Message DTO used by the bridge.

Defines the frozen `Message` dataclass and the `Role` literal. Messages are
serialized verbatim into the ``messages`` array of the outbound request body.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal


Role = Literal["system", "user", "assistant"]
ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    """A role-tagged chat message.

    Attributes:
        role: ``"system"``, ``"user"`` or ``"assistant"``.
        content: Plain text content.
    """

    role: Role
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"unsupported message role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


__all__ = [
    "Message",
    "Role",
    "ROLES",
]
