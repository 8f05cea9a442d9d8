"""CLI action handler for chat-bridge.

Purpose
-------
Run one chat exchange for parsed CLI arguments, keeping the entrypoint thin.
No top-level side effects; safe to import in tests.

Cancellation
------------
The exchange runs on a worker thread. Ctrl-C in the main thread cancels the
shared token; the worker observes it before its next chunk read, releases the
connection and finishes normally.

Exit Codes
----------
- ``0``: clean end (sentinel or peer close) or cancellation.
- ``1``: failure, invalid input, or no endpoint configured.
"""

from __future__ import annotations

import argparse
import json
import sys
import threading
from typing import Any, Dict, List, Optional, TextIO, Tuple

from pydantic import ValidationError

from ...base.cancellation import CancellationToken
from ...base.logging import configure_logger
from ...base.models import ChatResponse, StreamOutcome
from ...config import get_bridge_config
from ...transport import TransportClient
from ..bridge import handle_chat
from ..sink import CollectingSink, ResponseSink, TextStreamSink

JOIN_POLL_SECONDS = 0.1


def read_references(paths: List[str]) -> List[Tuple[str, str]]:
    """Read each referenced file as UTF-8 text.

    Raises:
        OSError: A file cannot be read.
    """
    refs = []
    for path in paths:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            refs.append((path, fh.read()))
    return refs


def response_summary(response: Optional[ChatResponse]) -> Dict[str, Any]:
    """JSON-serializable summary printed by ``--json``."""
    if response is None:
        return {"text": None, "outcome": None, "error": "missing endpoint"}
    outcome = response.meta.outcome
    return {
        "text": response.text,
        "model": response.meta.model,
        "outcome": outcome.value if outcome is not None else None,
        "latency_ms": response.meta.latency_ms,
        **response.meta.extra,
    }


def exit_code_for(response: Optional[ChatResponse]) -> int:
    if response is None or response.meta.outcome is StreamOutcome.FAILED:
        return 1
    return 0


def run_with_interrupt(target, token: CancellationToken) -> Any:
    """Run ``target()`` on a worker thread; Ctrl-C cancels ``token``.

    Returns the target's result; re-raises its exception in the caller.
    """
    box: Dict[str, Any] = {}

    def _worker() -> None:
        try:
            box["result"] = target()
        except BaseException as exc:  # re-raised on the calling thread
            box["error"] = exc

    worker = threading.Thread(target=_worker, name="chat-bridge-exchange", daemon=True)
    worker.start()
    while worker.is_alive():
        try:
            worker.join(JOIN_POLL_SECONDS)
        except KeyboardInterrupt:
            token.cancel("keyboard interrupt")
    if "error" in box:
        raise box["error"]
    return box.get("result")


def handle_run(
    args: argparse.Namespace,
    *,
    transport: Optional[TransportClient] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Execute one exchange for ``args``.

    Parameters
    ----------
    args: argparse.Namespace
        Parsed arguments from ``build_parser``.
    transport: Optional[TransportClient]
        Injection point for tests; defaults to the pooled client.
    out, err: Optional[TextIO]
        Output streams; default to ``sys.stdout``/``sys.stderr``.

    Returns
    -------
    int
        Process exit code.
    """
    out = out or sys.stdout
    err = err or sys.stderr
    if args.log_level or args.log_file:
        configure_logger(level=args.log_level, file_path=args.log_file)

    config = get_bridge_config(
        {
            "endpoint": args.endpoint,
            "api_key": args.api_key,
            "model": args.model,
            "max_tokens": args.max_tokens,
        }
    )
    try:
        references = read_references(args.files)
    except OSError as e:
        print(json.dumps({"error": f"cannot read referenced file: {e}"}), file=err)
        return 1

    sink: ResponseSink = CollectingSink() if args.json else TextStreamSink(out, err)
    token = CancellationToken()

    def _exchange() -> Optional[ChatResponse]:
        return handle_chat(
            args.prompt,
            sink,
            token,
            command=args.command,
            references=references,
            config=config,
            transport=transport,
            stream=args.stream,
        )

    try:
        response = run_with_interrupt(_exchange, token)
    except (ValidationError, ValueError) as e:
        print(json.dumps({"error": str(e)}), file=err)
        return 1

    if args.json:
        print(json.dumps(response_summary(response), ensure_ascii=False, default=str), file=out)
    else:
        print(file=out)
    return exit_code_for(response)


__all__ = [
    "handle_run",
    "read_references",
    "response_summary",
    "exit_code_for",
    "run_with_interrupt",
]
