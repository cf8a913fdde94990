"""Exception types raised while resolving configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ConfigError(Exception):
    """Base class for every configuration failure."""


class EnvBindingError(ConfigError):
    """An EVANS_* environment variable could not be coerced to its field type."""

    def __init__(self, name: str, value: str, kind: str) -> None:
        super().__init__(f"envconfig: {name}={value!r} is not a valid {kind}")
        self.name = name
        self.value = value
        self.kind = kind


class StoreError(ConfigError):
    """The persisted config file could not be created, opened or edited."""


class DiscoveryError(ConfigError):
    """Looking up the project root failed in a way that is not 'not found'."""


class ConfigDecodeError(ConfigError):
    """A config file exists but could not be decoded."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None) -> None:
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = Path(path) if path is not None else None
