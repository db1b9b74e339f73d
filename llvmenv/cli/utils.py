"""
Shared utilities for CLI commands.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from llvmenv.build import BuildEnvironmentResolver, Installation, InstallationRegistry
from llvmenv.core.directory import EnvironmentPaths

logger = logging.getLogger(__name__)


def get_paths() -> EnvironmentPaths:
    """Resolve managed directories once per invocation and make sure they exist."""
    return EnvironmentPaths.from_environment().ensure()


def get_registry(paths: EnvironmentPaths) -> InstallationRegistry:
    return InstallationRegistry(paths)


def get_resolver(paths: EnvironmentPaths) -> BuildEnvironmentResolver:
    return BuildEnvironmentResolver(paths, get_registry(paths))


def seek_current(paths: EnvironmentPaths, start: Optional[Path] = None) -> Installation:
    """Active build for ``start`` (default: the current directory)."""
    return get_resolver(paths).seek(start or Path.cwd())


def print_marker_origin(installation: Installation) -> None:
    """Print which marker selected ``installation`` to stderr."""
    if installation.marker_path is not None:
        print(f"set by {installation.marker_path}", file=sys.stderr)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
