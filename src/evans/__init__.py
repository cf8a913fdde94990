"""
Evans: layered configuration for the Evans gRPC client
"""

__version__ = "0.1.0"

from evans.config import (
    ConfigError,
    ConfigLoader,
    EvansConfig,
    edit,
    get,
    get_default_config,
    load_config,
)

__all__ = [
    "EvansConfig",
    "ConfigLoader",
    "ConfigError",
    "get",
    "edit",
    "load_config",
    "get_default_config",
]
