"""
Directory structure management for llvmenv.

Resolves the managed directories once at startup and hands them to the
components that need them.

Directory Structure:
    Config ($XDG_CONFIG_HOME/llvmenv, default ~/.config/llvmenv):
        - entry.yaml : User-defined build entries
        - .llvmenv   : Global marker naming the active build

    Cache ($XDG_CACHE_HOME/llvmenv, default ~/.cache/llvmenv):
        - <entry>/       : Fetched source tree of an entry
        - <entry>/build/ : CMake build directory

    Data ($XDG_DATA_HOME/llvmenv, default ~/.local/share/llvmenv):
        - <build>/bin/   : An installed build
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import DirectoryCreationError

logger = logging.getLogger(__name__)

APP_NAME = "llvmenv"
SYSTEM_PREFIX = Path("/usr")


def _xdg_dir(env: Mapping[str, str], variable: str, fallback: Path) -> Path:
    value = env.get(variable)
    # Relative values are invalid per XDG Base Directory rules and are ignored
    if value and Path(value).is_absolute():
        return Path(value) / APP_NAME
    return fallback / APP_NAME


def get_config_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the configuration directory path.

    Example:
        >>> get_config_dir({"XDG_CONFIG_HOME": "/tmp/conf"})
        PosixPath('/tmp/conf/llvmenv')
    """
    env = os.environ if env is None else env
    return _xdg_dir(env, "XDG_CONFIG_HOME", Path.home() / ".config")


def get_cache_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """Get the directory where entry sources are fetched and built."""
    env = os.environ if env is None else env
    return _xdg_dir(env, "XDG_CACHE_HOME", Path.home() / ".cache")


def get_data_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """Get the directory holding installed builds."""
    env = os.environ if env is None else env
    return _xdg_dir(env, "XDG_DATA_HOME", Path.home() / ".local" / "share")


@dataclass(frozen=True)
class EnvironmentPaths:
    """
    Managed locations used by llvmenv.

    Attributes:
        config_dir: Holds entry.yaml and the global marker
        cache_dir: Holds fetched sources and build directories
        data_dir: Holds installed builds, one subdirectory per build
        system_prefix: Prefix of the unmanaged "system" build
    """

    config_dir: Path
    cache_dir: Path
    data_dir: Path
    system_prefix: Path = SYSTEM_PREFIX

    @classmethod
    def from_environment(
        cls, env: Optional[Mapping[str, str]] = None
    ) -> "EnvironmentPaths":
        """Resolve all locations from XDG environment variables."""
        env = os.environ if env is None else env
        return cls(
            config_dir=get_config_dir(env),
            cache_dir=get_cache_dir(env),
            data_dir=get_data_dir(env),
        )

    @classmethod
    def under(cls, root: Path, system_prefix: Path = SYSTEM_PREFIX) -> "EnvironmentPaths":
        """Place all managed directories below a single root."""
        root = Path(root)
        return cls(
            config_dir=root / "config",
            cache_dir=root / "cache",
            data_dir=root / "data",
            system_prefix=system_prefix,
        )

    def ensure(self) -> "EnvironmentPaths":
        """
        Create the managed directories if they don't exist.

        Raises:
            DirectoryCreationError: If a directory cannot be created.
        """
        for path in (self.config_dir, self.cache_dir, self.data_dir):
            if path.is_dir():
                continue
            try:
                path.mkdir(parents=True, exist_ok=True)
                logger.debug(f"Created directory {path}")
            except OSError as e:
                raise DirectoryCreationError(
                    path, f"Failed to create directory at {path}: {e}"
                ) from e
        return self
