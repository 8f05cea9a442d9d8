"""Unified configuration layer for the bridge.

Goals
-----
* Centralize defaults (model, output cap, endpoint).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional JSON config file pointed to by ``CHAT_BRIDGE_CONFIG_FILE``
    3. Environment variables (``CHAT_BRIDGE_ENDPOINT``, ``CHAT_BRIDGE_API_KEY``,
       ``CHAT_BRIDGE_MODEL``, ``CHAT_BRIDGE_MAX_TOKENS``)
    4. In-code overrides passed to the helper (``None`` values ignored)
* Provide a single call site: ``get_bridge_config()``.

External Config File (Optional)
-------------------------------
A flat JSON object, for example::

    {"endpoint": "http://localhost:8000/v1/chat/completions",
     "model": "llama3", "max_tokens": 512}

A missing file or a document that is not a JSON object is treated as empty.

Public API
----------
* get_bridge_config(overrides: dict | None = None) -> dict
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .defaults import CONFIG_FILE_ENV, DEFAULT_ENDPOINT, DEFAULT_MAX_TOKENS, DEFAULT_MODEL
from .env import ENV_FIELD_MAP, env_var_name, load_dotenv_once

DEFAULTS: Dict[str, Any] = {
    "endpoint": DEFAULT_ENDPOINT,
    "model": DEFAULT_MODEL,
    "max_tokens": DEFAULT_MAX_TOKENS,
}

_FILE_CACHE: Optional[Tuple[str, Dict[str, Any]]] = None


def _load_external_config() -> Dict[str, Any]:
    """Read the JSON config file once per path."""
    global _FILE_CACHE
    path = os.getenv(CONFIG_FILE_ENV)
    if not path:
        return {}
    if _FILE_CACHE is not None and _FILE_CACHE[0] == path:
        return _FILE_CACHE[1]
    p = Path(path)
    data: Any = {}
    if p.exists():
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except ValueError:
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = (path, data)
    return data


def _coerce_max_tokens(value: Any) -> Optional[int]:
    """Return a positive int or ``None`` when the value is unusable."""
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field in ENV_FIELD_MAP:
        val = os.getenv(env_var_name(field))
        if val is not None:
            out[field] = val
    return out


def get_bridge_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the merged bridge configuration.

    Merge order (later wins): defaults -> config file -> env vars -> overrides.
    ``max_tokens`` is coerced to a positive int; unusable values fall back to
    the previous layer. A blank ``api_key`` is dropped.
    """
    load_dotenv_once()
    cfg: Dict[str, Any] = dict(DEFAULTS)
    layers = [_load_external_config(), _env_overrides()]
    if overrides:
        layers.append({k: v for k, v in overrides.items() if v is not None})
    for layer in layers:
        for key, value in layer.items():
            if key == "max_tokens":
                value = _coerce_max_tokens(value)
                if value is None:
                    continue
            cfg[key] = value

    cfg["endpoint"] = str(cfg.get("endpoint") or "").strip()
    if not cfg.get("api_key"):
        cfg.pop("api_key", None)
    return cfg


def reset_config_cache() -> None:
    """Forget the cached config file contents (tests)."""
    global _FILE_CACHE
    _FILE_CACHE = None


__all__ = [
    "get_bridge_config",
    "reset_config_cache",
    "DEFAULTS",
]
