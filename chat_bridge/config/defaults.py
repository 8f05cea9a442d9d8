"""chat_bridge.config.defaults
==========================

Small, stable default values used by the configuration layer, the service
layer and the CLI. They can be overridden via the config file, environment
variables or explicit overrides.

Only plain constants live here; this module imports nothing from the package.
"""

from __future__ import annotations

# ---- Request defaults ----

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_MAX_TOKENS = 1000
# No endpoint is assumed: the host must configure one.
DEFAULT_ENDPOINT = ""

# ---- Environment variable names ----

CONFIG_FILE_ENV = "CHAT_BRIDGE_CONFIG_FILE"
DOTENV_FILE_ENV = "CHAT_BRIDGE_DOTENV_FILE"
ENV_PREFIX = "CHAT_BRIDGE_"

# ---- Service messages ----

PROGRESS_MESSAGE = "Connecting to AI server..."
MISSING_ENDPOINT_MESSAGE = "Please configure your AI server endpoint in settings."
ERROR_NOTICE_PREFIX = "Failed to get response from AI service: "

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_ENDPOINT",
    "CONFIG_FILE_ENV",
    "DOTENV_FILE_ENV",
    "ENV_PREFIX",
    "PROGRESS_MESSAGE",
    "MISSING_ENDPOINT_MESSAGE",
    "ERROR_NOTICE_PREFIX",
]
