"""
Fetching and updating source trees described by resource descriptors.
"""

import logging
from pathlib import Path
from typing import Optional

from ..core.download import ProgressCallback, open_stream
from ..core.exceptions import FilesystemIOError
from ..core.filesystem import compression_for, safe_rmtree, unpack_tar_stream
from ..core.process import check_run
from .descriptor import Archive, GitRepository, ResourceDescriptor, Subversion
from .locator import get_filename_from_url

logger = logging.getLogger(__name__)


def _prepare_destination(destination: Path) -> bool:
    """Create ``destination`` if needed. Returns True if it was created here."""
    if destination.exists():
        if not destination.is_dir():
            raise FilesystemIOError(
                destination, f"Destination is not a directory: {destination}"
            )
        return False
    try:
        destination.mkdir(parents=True)
    except OSError as e:
        raise FilesystemIOError(
            destination, f"Failed to create {destination}: {e}"
        ) from e
    return True


def _cleanup_on_error(destination: Path) -> None:
    logger.info(f"Removing partial fetch: {destination}")
    try:
        safe_rmtree(destination)
    except FilesystemIOError as e:
        logger.warning(f"Failed to remove partial fetch: {e}")


class ResourceFetcher:
    """
    Populate and refresh source directories.

    Subversion and Git resources are handled by the ``svn`` and ``git``
    command line tools; archives are streamed over HTTP and unpacked with
    their top-level directory removed.

    Example:
        >>> fetcher = ResourceFetcher()
        >>> fetcher.download(Archive("http://releases.llvm.org/6.0.1/llvm-6.0.1.src.tar.xz"),
        ...                  Path("~/.cache/llvmenv/6.0.1").expanduser())
    """

    def __init__(self, progress_callback: Optional[ProgressCallback] = None):
        self.progress_callback = progress_callback

    def download(self, resource: ResourceDescriptor, destination: Path) -> None:
        """
        Fetch ``resource`` into ``destination``.

        Raises:
            FilesystemIOError: If destination exists and is not a directory
            ExternalToolError: If svn or git fails
            DownloadError: If the archive cannot be fetched
            UnsupportedArchiveFormatError: If the archive compression is unknown
            ArchiveUnpackError: If unpacking fails
        """
        destination = Path(destination)
        if not isinstance(resource, (Subversion, GitRepository, Archive)):
            raise TypeError(f"Unknown resource descriptor: {resource!r}")

        created = _prepare_destination(destination)
        logger.info(f"Fetch {resource} into {destination}")
        try:
            self._fetch(resource, destination)
        except BaseException:
            # A half-filled tree would be taken for a finished checkout later
            if created:
                _cleanup_on_error(destination)
            raise

    def _fetch(self, resource: ResourceDescriptor, destination: Path) -> None:
        if isinstance(resource, Subversion):
            check_run(["svn", "co", "-r", "HEAD", resource.url, destination])
        elif isinstance(resource, GitRepository):
            cmd = ["git", "clone", "--depth", "1"]
            if resource.branch:
                cmd += ["-b", resource.branch]
            check_run(cmd + [resource.url, destination])
        elif isinstance(resource, Archive):
            self._download_archive(resource, destination)

    def _download_archive(self, resource: Archive, destination: Path) -> None:
        compression = compression_for(get_filename_from_url(resource.url))
        with open_stream(resource.url, self.progress_callback) as stream:
            unpack_tar_stream(stream, destination, compression, strip=1)

    def update(self, resource: ResourceDescriptor, destination: Path) -> None:
        """
        Bring an existing checkout of ``resource`` up to date.

        Archives have nothing to update and are left untouched.
        """
        destination = Path(destination)

        if isinstance(resource, Subversion):
            logger.info(f"Update {destination} (svn)")
            check_run(["svn", "update"], cwd=destination)
        elif isinstance(resource, GitRepository):
            logger.info(f"Update {destination} (git)")
            check_run(["git", "pull"], cwd=destination)
        elif isinstance(resource, Archive):
            logger.debug(f"Archive {resource.url} has no update, skipped")
        else:
            raise TypeError(f"Unknown resource descriptor: {resource!r}")
