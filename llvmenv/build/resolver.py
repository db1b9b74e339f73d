"""
Resolution of the active build.

The active build is chosen from three tiers, first hit wins:

1. ``.llvmenv`` markers in the start directory and its ancestors, nearest first
2. the global ``.llvmenv`` marker in the config directory
3. the system build

A marker only counts if the build it names exists; otherwise the search
continues with the next candidate.
"""

import logging
from pathlib import Path
from typing import Optional

from ..core.directory import EnvironmentPaths
from ..core.exceptions import (
    DirectoryCreationError,
    FilesystemIOError,
    MarkerUnreadableError,
)
from .installation import Installation
from .registry import InstallationRegistry

logger = logging.getLogger(__name__)

MARKER_NAME = ".llvmenv"


def read_marker(directory: Path) -> Optional[str]:
    """
    Read the build name stored in ``directory``'s marker file.

    Returns:
        The trimmed name, or None if there is no marker

    Raises:
        MarkerUnreadableError: If the marker exists but cannot be read
    """
    marker = Path(directory) / MARKER_NAME
    if not marker.is_file():
        return None
    try:
        return marker.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        raise MarkerUnreadableError(marker, str(e)) from e


def write_marker(directory: Path, name: str) -> Path:
    """
    Write ``name`` as the only content of ``directory``'s marker file.

    Raises:
        FilesystemIOError: If the marker cannot be written
    """
    marker = Path(directory) / MARKER_NAME
    try:
        marker.write_text(name, encoding="utf-8")
    except OSError as e:
        raise FilesystemIOError(marker, f"Failed to write {marker}: {e}") from e
    logger.info(f"Write setting to {marker}")
    return marker


class BuildEnvironmentResolver:
    """
    Determine which build applies to a directory, and record choices.

    Example:
        >>> resolver = BuildEnvironmentResolver(EnvironmentPaths.from_environment())
        >>> resolver.seek(Path.cwd()).name
        'system'
    """

    def __init__(
        self,
        paths: EnvironmentPaths,
        registry: Optional[InstallationRegistry] = None,
    ):
        self.paths = paths
        self.registry = registry or InstallationRegistry(paths)

    @property
    def global_marker_dir(self) -> Path:
        return self.paths.config_dir

    def _load(self, directory: Path) -> Optional[Installation]:
        """Installation named by the marker in ``directory``, if usable."""
        try:
            name = read_marker(directory)
        except MarkerUnreadableError as e:
            logger.warning(f"{e}, ignored")
            return None
        if not name:
            return None

        installation = self.registry.from_name(name)
        if not installation.exists():
            logger.debug(
                f"{directory / MARKER_NAME} names missing build '{name}', skipped"
            )
            return None
        installation.marker_path = directory / MARKER_NAME
        return installation

    def seek(self, start: Path) -> Installation:
        """
        Find the active build for ``start``. Never fails.

        Args:
            start: Directory to start the upward search from
        """
        start = Path(start).resolve()
        for directory in (start, *start.parents):
            installation = self._load(directory)
            if installation is not None:
                logger.debug(f"Found {installation.name} in {directory}")
                return installation

        installation = self._load(self.global_marker_dir)
        if installation is not None:
            logger.debug(f"Found {installation.name} in global setting")
            return installation

        return self.registry.system()

    def set_global(self, installation: Installation) -> Path:
        """Make ``installation`` the global default. Returns the marker path."""
        try:
            self.global_marker_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreationError(
                self.global_marker_dir,
                f"Failed to create directory at {self.global_marker_dir}: {e}",
            ) from e
        return write_marker(self.global_marker_dir, installation.name)

    def set_local(self, installation: Installation, directory: Path) -> Path:
        """Make ``installation`` active for ``directory`` and below."""
        return write_marker(directory, installation.name)
