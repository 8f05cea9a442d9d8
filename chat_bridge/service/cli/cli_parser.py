"""CLI parser construction for chat-bridge.

This module wires argument shapes only; execution lives in ``cli_actions``.
"""

from __future__ import annotations

import argparse

from ..prompts import COMMANDS


def add_stream_flags(parser: argparse.ArgumentParser) -> None:
    """Attach ``--stream``/``--no-stream`` flags (streaming is the default)."""
    grp = parser.add_mutually_exclusive_group()
    grp.add_argument("--stream", dest="stream", action="store_true", default=True)
    grp.add_argument("--no-stream", dest="stream", action="store_false")


def build_parser() -> argparse.ArgumentParser:
    """Construct the ``chat-bridge`` parser. No side effects."""
    p = argparse.ArgumentParser(
        prog="chat-bridge",
        description="Send a prompt to an OpenAI-compatible endpoint and stream the answer",
    )
    p.add_argument("prompt", metavar="PROMPT")
    p.add_argument("--endpoint", default=None, help="Chat completion URL (overrides config)")
    p.add_argument("--api-key", dest="api_key", default=None)
    p.add_argument("--model", default=None)
    p.add_argument("--max-tokens", dest="max_tokens", type=int, default=None)
    p.add_argument("--command", choices=COMMANDS, default=None)
    p.add_argument("--file", dest="files", action="append", default=[], metavar="PATH",
                   help="Attach a referenced file (repeatable)")
    add_stream_flags(p)
    p.add_argument("--json", action="store_true", help="Print a JSON summary instead of streaming text")
    p.add_argument("--log-level", dest="log_level", default=None)
    p.add_argument("--log-file", dest="log_file", default=None)
    return p


__all__ = ["build_parser", "add_stream_flags"]
