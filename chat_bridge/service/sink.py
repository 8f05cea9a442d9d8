"""Response sinks: where a bridge renders progress and markdown fragments."""
from __future__ import annotations

from typing import List, Protocol, TextIO, runtime_checkable


@runtime_checkable
class ResponseSink(Protocol):
    """Append-only rendering surface for one chat response.

    ``progress`` is called once before the first fragment; ``markdown`` once
    per fragment, in arrival order.
    """

    def progress(self, message: str) -> None: ...

    def markdown(self, fragment: str) -> None: ...


class CollectingSink:
    """Records every call; used by tests and by hosts that render later."""

    def __init__(self) -> None:
        self.progress_messages: List[str] = []
        self.fragments: List[str] = []

    def progress(self, message: str) -> None:
        self.progress_messages.append(message)

    def markdown(self, fragment: str) -> None:
        self.fragments.append(fragment)

    @property
    def text(self) -> str:
        return "".join(self.fragments)


class TextStreamSink:
    """Writes fragments to a text stream as they arrive (CLI host)."""

    def __init__(self, out: TextIO, err: TextIO) -> None:
        self._out = out
        self._err = err

    def progress(self, message: str) -> None:
        print(message, file=self._err, flush=True)

    def markdown(self, fragment: str) -> None:
        self._out.write(fragment)
        self._out.flush()


__all__ = ["ResponseSink", "CollectingSink", "TextStreamSink"]
