"""
llvmenv/build/installation.py

A named LLVM/Clang build and the queries that can be made about it.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..core.exceptions import VersionParseError
from ..core.filesystem import create_tar_xz, expand_tar
from ..core.process import capture_output

logger = logging.getLogger(__name__)

SYSTEM_NAME = "system"
VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)")

Version = Tuple[int, int, int]


@dataclass
class Installation:
    """
    A build of LLVM/Clang.

    Attributes:
        name: Unique name of the build ("system" is reserved)
        prefix: Directory the build is installed into
        marker_path: Marker file that selected this build, if any
    """

    name: str
    prefix: Path
    marker_path: Optional[Path] = None

    @classmethod
    def system(cls, prefix: Path = Path("/usr")) -> "Installation":
        """The unmanaged baseline build."""
        return cls(name=SYSTEM_NAME, prefix=Path(prefix))

    @classmethod
    def from_path(cls, path: Path) -> "Installation":
        """Build named after its prefix directory."""
        path = Path(path)
        return cls(name=path.name, prefix=path)

    @property
    def is_system(self) -> bool:
        return self.name == SYSTEM_NAME

    @property
    def bin_dir(self) -> Path:
        return self.prefix / "bin"

    def exists(self) -> bool:
        """
        Check whether the build is installed.

        A managed build exists iff its prefix contains ``bin``; the system
        build always exists.
        """
        if self.is_system:
            return True
        return self.bin_dir.is_dir()

    def version(self) -> Version:
        """
        Get the (major, minor, patch) version of the build.

        Runs ``clang --version`` from the build's ``bin`` directory:

            $ clang --version
            clang version 7.0.0 (tags/RELEASE_700/final)  # parse this line
            Target: x86_64-pc-linux-gnu

        Raises:
            ExternalToolError: If clang is missing or fails
            VersionParseError: If no version is found in the output
        """
        clang = self.bin_dir / "clang"
        output = capture_output([clang, "--version"])
        return parse_version(output)

    def archive(self, destination_dir: Path, verbose: bool = False) -> Path:
        """
        Pack the build into ``<destination_dir>/<name>.tar.xz``.

        Returns:
            Path of the created archive
        """
        archive_path = Path(destination_dir) / f"{self.name}.tar.xz"
        logger.info(f"Archive {self.prefix} into {archive_path}")
        return create_tar_xz(self.prefix, archive_path, verbose=verbose)

    def __str__(self) -> str:
        return self.name


def parse_version(output: str) -> Version:
    """
    Parse the first ``X.Y.Z`` version found in compiler output.

    Example:
        >>> parse_version("clang version 6.0.1-svn331815-1~exp1~20180510084719.80")
        (6, 0, 1)

    Raises:
        VersionParseError: If no version is found
    """
    match = VERSION_PATTERN.search(output)
    if not match:
        raise VersionParseError(
            f"Failed to parse $(clang --version) output: {output[:200]!r}"
        )
    major, minor, patch = (int(group) for group in match.groups())
    return major, minor, patch


def expand_archive(archive_path: Path, data_dir: Path, verbose: bool = False) -> None:
    """
    Expand an archived build into the data directory.

    Raises:
        FilesystemIOError: If the archive doesn't exist
        ArchiveUnpackError: If extraction fails
    """
    logger.info(f"Expand {archive_path} into {data_dir}")
    expand_tar(archive_path, data_dir, verbose=verbose)
