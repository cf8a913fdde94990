"""Configuration system for Evans.

This module resolves the effective configuration from layered sources.

Configuration Sources (Priority Order):
1. Local Config (highest) - .evans.toml in the cwd, else at the git root
2. User Config - ~/.config/evans/config.toml (persisted store)
3. Environment Variables - EVANS_* prefixed variables
4. Defaults (lowest) - Built-in defaults

Example Usage:
    from evans.config import get

    config = get()
    print(config.server.host)           # "127.0.0.1"
    print(config.repl.server is config.server)  # True

Environment Variables:
    Every setting can be overridden with an EVANS_<SECTION>_<KEY> variable:
    - EVANS_SERVER_PORT=50052
    - EVANS_SERVER_TLS=true
    - EVANS_DEFAULT_PROTOPATH=protos,vendor/protos
"""

from .discovery import LOCAL_CONFIG_NAME, LocalConfig, find_local, lookup_project_root
from .errors import (
    ConfigDecodeError,
    ConfigError,
    DiscoveryError,
    EnvBindingError,
    StoreError,
)
from .loader import (
    ENV_PREFIX,
    ConfigLoader,
    build_global,
    edit,
    get,
    get_loader,
    load_config,
    load_env_vars,
    open_store,
)
from .merge import merge_config, setup_config
from .schema import (
    DefaultConfig,
    EnvConfig,
    EvansConfig,
    Header,
    InputConfig,
    LogConfig,
    MetaConfig,
    ReplConfig,
    RequestConfig,
    ServerConfig,
    get_default_config,
)
from .store import ConfigStore
from .validation import (
    ConfigValidationError,
    ValidationError,
    ValidationResult,
    validate_data,
)

__all__ = [
    # Main config class
    "EvansConfig",
    # Section configs
    "DefaultConfig",
    "MetaConfig",
    "ReplConfig",
    "EnvConfig",
    "ServerConfig",
    "LogConfig",
    "RequestConfig",
    "Header",
    "InputConfig",
    "get_default_config",
    # Resolution
    "ConfigLoader",
    "ConfigStore",
    "LocalConfig",
    "LOCAL_CONFIG_NAME",
    "ENV_PREFIX",
    "build_global",
    "find_local",
    "lookup_project_root",
    "load_env_vars",
    "open_store",
    "merge_config",
    "setup_config",
    "load_config",
    "get_loader",
    "get",
    "edit",
    # Errors
    "ConfigError",
    "ConfigDecodeError",
    "ConfigValidationError",
    "DiscoveryError",
    "EnvBindingError",
    "StoreError",
    # Validation
    "validate_data",
    "ValidationError",
    "ValidationResult",
]
