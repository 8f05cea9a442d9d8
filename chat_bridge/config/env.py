"""chat_bridge.config.env
=====================

Environment helpers for the configuration layer.

Purpose
-------
- Map configuration fields to their ``CHAT_BRIDGE_*`` environment variables.
- Load an optional ``.env`` file once per process without extra dependencies.

Failure Modes
-------------
- A missing ``.env`` file is not an error.
- Helpers never raise on unset variables; callers decide how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

from .defaults import DOTENV_FILE_ENV, ENV_PREFIX

ENV_FIELD_MAP: Dict[str, str] = {
    "endpoint": "ENDPOINT",
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "model": "MODEL",
    "max_tokens": "MAX_TOKENS",
}

_DOTENV_LOADED = False


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the value looks like a placeholder or test token.

    Heuristics: contains 'placeholder' or 'changeme', or starts with 'test_'.
    Case-insensitive.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or v.startswith("test_")


def env_var_name(field: str) -> str:
    """Return the environment variable name for a config field."""
    return f"{ENV_PREFIX}{ENV_FIELD_MAP[field]}"


def load_dotenv_once() -> None:
    """Lightweight ``.env`` loader.

    Parses KEY=VALUE lines from ``CHAT_BRIDGE_DOTENV_FILE`` (default ``.env``),
    ignoring comments and blank lines. Existing variables are only replaced
    when their current value is a placeholder.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv(DOTENV_FILE_ENV, ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def reset_dotenv_state() -> None:
    """Allow the next ``load_dotenv_once`` call to read the file again (tests)."""
    global _DOTENV_LOADED
    _DOTENV_LOADED = False


__all__ = [
    "ENV_FIELD_MAP",
    "is_placeholder",
    "env_var_name",
    "load_dotenv_once",
    "reset_dotenv_state",
]
