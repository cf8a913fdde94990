"""Overlay of a local override onto the global configuration, and setup.

Presence is explicit: the local file is kept as the raw decoded mapping,
so a key overrides the global value exactly when the file mentions it,
even when the value is ``false`` or ``""``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from .schema import EvansConfig, InputConfig, RequestConfig, default_headers

if TYPE_CHECKING:
    from .discovery import LocalConfig

logger = logging.getLogger(__name__)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Nested dicts are merged key by key; any other value, lists included,
    is replaced wholesale.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def merge_config(
    global_config: EvansConfig, local: Optional[LocalConfig]
) -> EvansConfig:
    """Combine the global configuration with an optional local override.

    The global configuration is not modified; the result is a new object.
    Call :func:`setup_config` on it before use.

    Args:
        global_config: Configuration built from defaults, env and the store
        local: Decoded local override, or None when there is none

    Returns:
        Newly built merged configuration
    """
    data = global_config.to_dict()
    if local is None:
        return EvansConfig.from_dict(data)

    logger.debug(f"Merging local config from {local.path}")
    return EvansConfig.from_dict(deep_merge(data, local.data))


def _is_placeholder(values: list[str]) -> bool:
    return len(values) == 1 and values[0] == ""


def setup_config(config: EvansConfig) -> None:
    """Normalize a configuration in place before it is handed out.

    Every step is idempotent:
    - ``default.protoFile`` / ``default.protoPath`` placeholders ``[""]``
      become empty lists
    - ``repl.server`` and ``env.server`` are re-linked to ``config.server``
    - a missing request section (or an empty header list) gets the
      default ``grpc-client`` header
    - a missing input section gets the default prompt format
    """
    if _is_placeholder(config.default.proto_file):
        config.default.proto_file = []
    if _is_placeholder(config.default.proto_path):
        config.default.proto_path = []

    config.repl.server = config.server
    config.env.server = config.server

    if config.request is None:
        config.request = RequestConfig()
    elif not config.request.header:
        config.request.header = default_headers()

    if config.input is None:
        config.input = InputConfig()
