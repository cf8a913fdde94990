"""Persisted user configuration store.

The store owns one TOML file (``meta.path``, by default
``~/.config/evans/config.toml``). On first use the file is written from a
template so every key shows up for editing; afterwards the file is the
authority for any key it contains and the template fills in the rest.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any, Union

import tomli_w

from .errors import ConfigDecodeError, StoreError
from .merge import deep_merge
from .schema import EvansConfig
from .validation import ensure_valid

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"


def load_toml_file(path: Path) -> dict[str, Any]:
    """Decode a TOML file and check it against the schema.

    Args:
        path: File to read

    Returns:
        The decoded mapping

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigDecodeError: If the file is not valid TOML
        ConfigValidationError: If a value has the wrong type
    """
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigDecodeError(str(e), path) from e

    result = ensure_valid(data, path)
    for warning in result.warnings:
        logger.warning(f"{path}: ignoring {warning}")
    return data


def _filter_none_values(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively drop None values, which TOML cannot represent."""
    result = {}
    for key, value in data.items():
        if value is None:
            continue
        elif isinstance(value, dict):
            result[key] = _filter_none_values(value)
        else:
            result[key] = value
    return result


class ConfigStore:
    """TOML-file backed store for the user's global configuration."""

    def __init__(self, path: Union[str, Path], template: EvansConfig):
        """Open the store, creating its backing file if needed.

        Args:
            path: Location of the config file; ``~`` is expanded
            template: Initial content and fallback for keys the file lacks

        Raises:
            StoreError: If the file cannot be created
        """
        self.path = Path(os.path.expanduser(str(path)))
        self.template = template
        if not self.path.exists():
            self._create()

    def _create(self) -> None:
        """Write the template through a temporary file so a failed write
        never leaves a truncated config behind."""
        temp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                temp_path = Path(f.name)
                tomli_w.dump(_filter_none_values(self.template.to_dict()), f)

            temp_path.replace(self.path)
        except OSError as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            raise StoreError(f"failed to create config file {self.path}: {e}") from e
        logger.debug(f"Created config file at {self.path}")

    def get(self) -> EvansConfig:
        """Return the stored configuration.

        Returns:
            A new EvansConfig; keys present in the file win over the template

        Raises:
            StoreError: If the file cannot be read
            ConfigDecodeError: If the file is malformed
        """
        try:
            stored = load_toml_file(self.path)
        except OSError as e:
            raise StoreError(f"failed to open config file {self.path}: {e}") from e

        logger.debug(f"Loaded user config from {self.path}")
        return EvansConfig.from_dict(deep_merge(self.template.to_dict(), stored))

    def edit(self) -> None:
        """Open the backing file in ``$EDITOR``.

        Raises:
            StoreError: If the editor cannot be started or exits non-zero
        """
        editor = os.environ.get("EDITOR") or DEFAULT_EDITOR
        cmd = shlex.split(editor) + [str(self.path)]
        logger.debug(f"Running editor: {cmd}")
        try:
            subprocess.run(cmd, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise StoreError(f"failed to edit {self.path}: {e}") from e
