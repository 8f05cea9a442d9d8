"""Chat command prompts and follow-up suggestions.

Maps a chat command (``None``/``generic``, ``summarize``, ``translate``,
``explain``) to the ordered message list sent to the backend. Only the generic
path attaches referenced files; ``explain`` follows the generic path.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..base.models import Message

GENERIC_SYSTEM_PROMPT = (
    "You are a helpful AI assistant integrated into VS Code. Provide concise, helpful responses."
)
SUMMARIZE_SYSTEM_PROMPT = (
    "You are a summarization expert. Provide clear, concise summaries that capture the key points."
)
TRANSLATE_SYSTEM_PROMPT = (
    "You are a translation expert. Provide accurate translations while preserving meaning and context."
)
SUMMARIZE_PREFIX = "Please summarize the following: "

COMMANDS = ("summarize", "translate", "explain")

Reference = Tuple[str, str]


@dataclass(frozen=True)
class Followup:
    """A suggested next prompt offered after a response."""

    prompt: str
    label: str
    command: str


FOLLOWUPS: Tuple[Followup, ...] = (
    Followup("Can you explain this in more detail?", "📝 More details", "explain"),
    Followup("Summarize the key points", "📋 Summarize", "summarize"),
    Followup("Translate this to Spanish", "🌐 Translate", "translate"),
)


def reference_message(path: str, text: str) -> Message:
    """Render one referenced file as an extra user message."""
    return Message(role="user", content=f"Referenced file {path}:\n```\n{text}\n```")


def build_messages(
    command: Optional[str],
    prompt: str,
    references: Iterable[Reference] = (),
) -> List[Message]:
    """Return the messages for ``command``.

    Raises:
        ValueError: ``command`` is not a known command.
    """
    if command == "summarize":
        return [
            Message(role="system", content=SUMMARIZE_SYSTEM_PROMPT),
            Message(role="user", content=f"{SUMMARIZE_PREFIX}{prompt}"),
        ]
    if command == "translate":
        return [
            Message(role="system", content=TRANSLATE_SYSTEM_PROMPT),
            Message(role="user", content=prompt),
        ]
    if command not in (None, "", "generic", "explain"):
        raise ValueError(f"unknown chat command: {command!r}")
    messages = [
        Message(role="system", content=GENERIC_SYSTEM_PROMPT),
        Message(role="user", content=prompt),
    ]
    messages.extend(reference_message(path, text) for path, text in references)
    return messages


def followups() -> List[Followup]:
    return list(FOLLOWUPS)


__all__ = [
    "COMMANDS",
    "Followup",
    "FOLLOWUPS",
    "GENERIC_SYSTEM_PROMPT",
    "SUMMARIZE_SYSTEM_PROMPT",
    "TRANSLATE_SYSTEM_PROMPT",
    "SUMMARIZE_PREFIX",
    "Reference",
    "build_messages",
    "followups",
    "reference_message",
]
