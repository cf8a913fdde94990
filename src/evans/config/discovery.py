"""Discovery of the project-local override file.

The override file (``.evans.toml``) is looked up in the working directory
first, then at the root of the enclosing git working tree.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from .errors import DiscoveryError
from .store import load_toml_file

logger = logging.getLogger(__name__)

LOCAL_CONFIG_NAME = ".evans.toml"
GIT_TIMEOUT = 5.0


@dataclass
class LocalConfig:
    """A decoded local override.

    ``data`` holds only the keys the file actually contains.
    """

    path: Path
    data: dict[str, Any] = field(default_factory=dict)


def lookup_project_root(
    cwd: Optional[Union[str, Path]] = None, timeout: float = GIT_TIMEOUT
) -> Optional[Path]:
    """Ask git for the working tree root, relative to ``cwd``.

    Args:
        cwd: Directory to run git in (defaults to the process cwd)
        timeout: Seconds to wait for git

    Returns:
        Path of the working tree root, or None when git is unavailable,
        times out, or ``cwd`` is not inside a working tree

    Raises:
        DiscoveryError: If git succeeds but writes to stderr
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--show-cdup"],
            cwd=base,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.debug("git not found, skipping project root lookup")
        return None
    except subprocess.TimeoutExpired:
        logger.warning(f"git rev-parse timed out after {timeout}s")
        return None

    if proc.returncode != 0:
        logger.debug(f"Not inside a git working tree: {proc.stderr.strip()}")
        return None
    if proc.stderr:
        raise DiscoveryError(f"git rev-parse --show-cdup: {proc.stderr.strip()}")

    return base / proc.stdout.strip()


def find_local(
    cwd: Optional[Union[str, Path]] = None, timeout: float = GIT_TIMEOUT
) -> Optional[LocalConfig]:
    """Find and decode the local override file.

    Args:
        cwd: Directory to start from (defaults to the process cwd)
        timeout: Seconds to wait for the git root lookup

    Returns:
        LocalConfig when a file is found, None when there is none

    Raises:
        ConfigDecodeError: If a found file is malformed
        DiscoveryError: If the git root lookup fails unexpectedly
        OSError: If a found file cannot be read
    """
    base = Path(cwd) if cwd is not None else Path.cwd()

    candidate = base / LOCAL_CONFIG_NAME
    if not candidate.exists():
        root = lookup_project_root(base, timeout)
        if root is None:
            return None
        candidate = root / LOCAL_CONFIG_NAME
        if not candidate.exists():
            logger.debug(f"No {LOCAL_CONFIG_NAME} at project root {root}")
            return None

    logger.debug(f"Found local config at {candidate}")
    return LocalConfig(path=candidate, data=load_toml_file(candidate))
