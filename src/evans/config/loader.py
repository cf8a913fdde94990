"""Configuration loader for Evans.

This module resolves the effective configuration from, lowest priority
first:
1. Default values
2. Environment variables (EVANS_* prefix)
3. User config file (~/.config/evans/config.toml)
4. Local config file (.evans.toml in the cwd or at the git root)

The first three make up the global configuration, which is built once
per loader. The local override is looked up again on every load.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .discovery import GIT_TIMEOUT, find_local
from .errors import EnvBindingError
from .merge import deep_merge, merge_config, setup_config
from .schema import (
    KIND_BOOL,
    KIND_HEADERS,
    KIND_STR_LIST,
    SCHEMA,
    EvansConfig,
    get_default_config,
)
from .store import ConfigStore

logger = logging.getLogger(__name__)

ENV_PREFIX = "EVANS_"

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def env_var_name(section: str, key: str) -> str:
    """Name of the environment variable bound to ``section.key``."""
    return f"{ENV_PREFIX}{section.upper()}_{key.upper()}"


def _parse_env_value(name: str, value: str, kind: str) -> Any:
    """Coerce an environment variable value to its field's kind."""
    if kind == KIND_BOOL:
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise EnvBindingError(name, value, kind)

    if kind == KIND_STR_LIST:
        if value == "":
            return []
        return [v.strip() for v in value.split(",")]

    if kind == KIND_HEADERS:
        if value == "":
            return []
        headers = []
        for item in value.split(","):
            k, sep, v = item.partition("=")
            if not sep or not k.strip():
                raise EnvBindingError(name, value, kind)
            headers.append({"key": k.strip(), "val": v.strip()})
        return headers

    return value


def load_env_vars(environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
    """Load configuration overrides from environment variables.

    Every schema field has one variable, e.g.
    - EVANS_SERVER_PORT -> server.port
    - EVANS_REPL_PROMPTFORMAT -> repl.promptFormat
    - EVANS_REQUEST_HEADER="key=val,key2=val2" -> request.header

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Nested mapping with only the fields that were set

    Raises:
        EnvBindingError: If a set variable cannot be coerced
    """
    environ = os.environ if environ is None else environ
    result: dict[str, Any] = {}

    for section, fields in SCHEMA.items():
        for key, kind in fields.items():
            name = env_var_name(section, key)
            if name not in environ:
                continue
            value = _parse_env_value(name, environ[name], kind)
            result.setdefault(section, {})[key] = value

    return result


def open_store(environ: Optional[Mapping[str, str]] = None) -> ConfigStore:
    """Open the persisted store with defaults plus env as its template.

    Args:
        environ: Mapping to read EVANS_* variables from

    Raises:
        EnvBindingError: If an environment variable has a bad value
        StoreError: If the store file cannot be created
    """
    config_dict = get_default_config().to_dict()

    env_overrides = load_env_vars(environ)
    if env_overrides:
        config_dict = deep_merge(config_dict, env_overrides)
        logger.debug("Applied environment variable overrides")

    template = EvansConfig.from_dict(config_dict)
    return ConfigStore(template.meta.path, template)


def build_global(environ: Optional[Mapping[str, str]] = None) -> EvansConfig:
    """Build the global configuration.

    Defaults are overlaid with environment variables, and the result is
    handed to the persisted store as its template. What the store returns
    is the global configuration.

    Args:
        environ: Mapping to read EVANS_* variables from

    Returns:
        The global configuration

    Raises:
        EnvBindingError: If an environment variable has a bad value
        StoreError: If the store file cannot be created or opened
        ConfigDecodeError: If the store file is malformed
    """
    return open_store(environ).get()


class ConfigLoader:
    """Resolve the effective configuration with priority handling."""

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
        git_timeout: float = GIT_TIMEOUT,
    ):
        """Initialize the configuration loader.

        Args:
            cwd: Directory local overrides are searched from (defaults to
                the process cwd at load time)
            environ: Environment mapping (defaults to os.environ)
            git_timeout: Seconds to wait for the git root lookup
        """
        self.cwd = Path(cwd) if cwd is not None else None
        self.environ = environ
        self.git_timeout = git_timeout
        self._global: Optional[EvansConfig] = None
        self._store: Optional[ConfigStore] = None
        self._lock = threading.Lock()

    def _ensure_global(self) -> tuple[EvansConfig, ConfigStore]:
        with self._lock:
            if self._global is None or self._store is None:
                store = open_store(self.environ)
                self._global, self._store = store.get(), store
                logger.debug(f"Global config built from {store.path}")
            return self._global, self._store

    @property
    def global_config(self) -> EvansConfig:
        """A copy of the global configuration, built on first access.

        The memoized instance itself is never handed out.
        """
        return EvansConfig.from_dict(self._ensure_global()[0].to_dict())

    @property
    def store(self) -> ConfigStore:
        """The persisted store, opened on first access."""
        return self._ensure_global()[1]

    def load(self) -> EvansConfig:
        """Resolve the effective configuration.

        Returns:
            A new, caller-owned EvansConfig with setup already applied

        Raises:
            ConfigError: If any layer fails to load
        """
        global_config = self._ensure_global()[0]
        local = find_local(self.cwd, self.git_timeout)
        config = merge_config(global_config, local)
        setup_config(config)
        return config

    def edit(self) -> None:
        """Open the persisted store in the user's editor."""
        self.store.edit()


_default_loader: Optional[ConfigLoader] = None
_default_loader_lock = threading.Lock()


def get_loader() -> ConfigLoader:
    """Return the process-wide loader, creating it on first use."""
    global _default_loader
    with _default_loader_lock:
        if _default_loader is None:
            _default_loader = ConfigLoader()
        return _default_loader


def load_config(
    cwd: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EvansConfig:
    """Load Evans configuration from all sources.

    This builds a fresh loader, so the global configuration is read again.
    Use :func:`get` to reuse the process-wide one.

    Args:
        cwd: Directory local overrides are searched from
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved EvansConfig
    """
    return ConfigLoader(cwd, environ).load()


def get() -> EvansConfig:
    """Resolve the effective configuration using the process-wide loader."""
    return get_loader().load()


def edit() -> None:
    """Edit the persisted user configuration."""
    get_loader().edit()
