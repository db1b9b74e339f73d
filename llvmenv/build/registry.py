"""
Discovery of installed builds under the data directory.
"""

import logging
from pathlib import Path
from typing import List

from ..core.directory import EnvironmentPaths
from ..core.exceptions import FilesystemIOError, InstallationNotFoundError
from .installation import SYSTEM_NAME, Installation, Version

logger = logging.getLogger(__name__)


class InstallationRegistry:
    """
    Enumerate and look up builds.

    The data directory is the only source of truth: every subdirectory with
    a ``bin`` directory is a build. The system build is never scanned, it is
    always listed first.

    Example:
        >>> registry = InstallationRegistry(EnvironmentPaths.from_environment())
        >>> [b.name for b in registry.list()]
        ['system', '6.0.1', 'llvm-mirror']
    """

    def __init__(self, paths: EnvironmentPaths):
        self.paths = paths

    @property
    def data_dir(self) -> Path:
        return self.paths.data_dir

    def system(self) -> Installation:
        return Installation.system(self.paths.system_prefix)

    def from_name(self, name: str) -> Installation:
        """Build the installation object for ``name`` without checking it exists."""
        if name == SYSTEM_NAME:
            return self.system()
        return Installation(name=name, prefix=self.data_dir / name)

    def get(self, name: str) -> Installation:
        """
        Look up an existing build by name.

        Raises:
            InstallationNotFoundError: If the build doesn't exist
        """
        installation = self.from_name(name)
        if not installation.exists():
            raise InstallationNotFoundError(name)
        return installation

    def _local_builds(self) -> List[Installation]:
        if not self.data_dir.is_dir():
            logger.debug(f"Data directory {self.data_dir} does not exist")
            return []
        try:
            paths = sorted(self.data_dir.iterdir())
        except OSError as e:
            raise FilesystemIOError(
                self.data_dir, f"Failed to read data directory {self.data_dir}: {e}"
            ) from e
        builds = []
        for path in paths:
            if not path.is_dir():
                continue
            installation = Installation.from_path(path)
            # A managed directory named "system" would shadow the baseline
            if installation.is_system:
                continue
            if installation.exists():
                builds.append(installation)
        return builds

    def list(self) -> List[Installation]:
        """
        List builds: the system build, then managed builds sorted by name.

        Raises:
            FilesystemIOError: If the data directory cannot be read
        """
        builds = sorted(self._local_builds(), key=lambda b: b.name)
        builds.insert(0, self.system())
        return builds

    def version(self, installation: Installation) -> Version:
        """Get the (major, minor, patch) version of ``installation``."""
        return installation.version()
