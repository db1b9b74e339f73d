"""
File system utilities for llvmenv.

This module provides:
- Streaming tar extraction with leading path component stripping
- Creation and expansion of redistributable build archives
- Safe file operations (safe deletion, temporary directories)
"""

import logging
import shutil
import sys
import tarfile
import tempfile
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterator, Optional, Union

from .exceptions import (
    ArchiveUnpackError,
    FilesystemIOError,
    InsecureArchiveError,
    UnsupportedArchiveFormatError,
)

logger = logging.getLogger(__name__)

# Compression of a tar archive, keyed by filename suffix
TAR_COMPRESSION = {
    ".tar.gz": "gz",
    ".tgz": "gz",
    ".taz": "gz",
    ".tar.xz": "xz",
}


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def strip_components(name: str, count: int = 1) -> str:
    """
    Drop the leading ``count`` components of an archive member path.

    Example:
        >>> strip_components("llvm-6.0.1.src/lib/IR/Core.cpp")
        'lib/IR/Core.cpp'
        >>> strip_components("llvm-6.0.1.src/")
        ''
    """
    parts = [p for p in PurePosixPath(name).parts if p not in ("", ".")]
    return "/".join(parts[count:])


def compression_for(filename: str) -> str:
    """
    Select the tar decompressor for an archive filename.

    Raises:
        UnsupportedArchiveFormatError: If no supported compression matches
    """
    for suffix, compression in TAR_COMPRESSION.items():
        if filename.endswith(suffix):
            return compression
    raise UnsupportedArchiveFormatError(
        f"Unsupported archive format: {filename}. "
        f"Supported: {', '.join(TAR_COMPRESSION)}"
    )


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()
    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def _extract_member(tar: tarfile.TarFile, member: tarfile.TarInfo, destination: Path) -> None:
    # Extract with filter for security (Python 3.12+)
    # For older Python, paths have already been validated
    if sys.version_info >= (3, 12):
        tar.extract(member, destination, filter="data")
    else:
        tar.extract(member, destination)


def unpack_tar_stream(
    stream: BinaryIO,
    destination: Union[str, Path],
    compression: str,
    strip: int = 1,
) -> int:
    """
    Unpack a compressed tar stream, stripping leading path components.

    Source archives wrap their content in a single versioned top directory
    (e.g. ``llvm-6.0.1.src/``); with ``strip=1`` its content lands directly
    in ``destination``. Entries that already exist are logged and skipped;
    any other failure aborts the extraction.

    Args:
        stream: Readable byte stream positioned at the start of the archive
        destination: Directory to unpack into
        compression: Tar compression ("gz" or "xz")
        strip: Number of leading path components to remove

    Returns:
        Number of unpacked entries

    Raises:
        UnsupportedArchiveFormatError: If compression is not supported
        InsecureArchiveError: If an entry escapes the destination
        ArchiveUnpackError: If reading or writing an entry fails

    Example:
        >>> with open("llvm-6.0.1.src.tar.xz", "rb") as f:
        ...     unpack_tar_stream(f, Path("src/llvm"), "xz")
    """
    if compression not in set(TAR_COMPRESSION.values()):
        raise UnsupportedArchiveFormatError(f"Unsupported tar compression: {compression}")

    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    count = 0

    try:
        with tarfile.open(fileobj=stream, mode=f"r|{compression}") as tar:
            for member in tar:
                stripped = strip_components(member.name, strip)
                if not stripped:
                    continue
                member.name = stripped
                if member.islnk():
                    member.linkname = strip_components(member.linkname, strip)

                _validate_archive_path(stripped, destination)
                try:
                    _extract_member(tar, member, destination)
                except FileExistsError as e:
                    logger.debug(f"Already exists, skipped: {stripped} ({e})")
                    continue
                count += 1
    except (InsecureArchiveError, UnsupportedArchiveFormatError):
        raise
    except (tarfile.TarError, OSError, EOFError) as e:
        raise ArchiveUnpackError(f"Failed to unpack archive into {destination}: {e}") from e

    logger.debug(f"Unpacked {count} entries into {destination}")
    return count


def _log_member(member: tarfile.TarInfo) -> tarfile.TarInfo:
    logger.info(member.name)
    return member


def create_tar_xz(
    source: Union[str, Path], archive_path: Union[str, Path], verbose: bool = False
) -> Path:
    """
    Pack a directory into ``archive_path`` as xz-compressed tar.

    Members are stored under the directory's own name. With ``verbose`` each
    member is logged as it is added.

    Raises:
        FilesystemIOError: If the source is missing or writing fails
    """
    source = Path(source)
    archive_path = Path(archive_path)

    if not source.is_dir():
        raise FilesystemIOError(source, f"Not a directory: {source}")

    try:
        with tarfile.open(archive_path, "w:xz") as tar:
            tar.add(source, arcname=source.name, filter=_log_member if verbose else None)
    except (tarfile.TarError, OSError) as e:
        raise FilesystemIOError(archive_path, f"Failed to create {archive_path}: {e}") from e

    return archive_path


def expand_tar(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    verbose: bool = False,
) -> None:
    """
    Expand a tar archive (any compression) into destination, keeping its layout.

    Raises:
        FilesystemIOError: If the archive doesn't exist
        ArchiveUnpackError: If extraction fails
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise FilesystemIOError(archive_path, f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive_path, "r:*") as tar:
            members = tar.getmembers()
            for member in members:
                _validate_archive_path(member.name, destination)
                if verbose:
                    _log_member(member)
            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError) as e:
        raise ArchiveUnpackError(f"Failed to extract {archive_path}: {e}") from e


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemIOError: If deletion fails

    Example:
        >>> safe_rmtree('/tmp/build', require_prefix='/tmp')
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemIOError(path, f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemIOError(path, f"Failed to remove directory '{path}': {e}") from e


@contextmanager
def temporary_directory(prefix: str = "llvmenv_") -> Iterator[Path]:
    """
    Context manager for a temporary directory removed on every exit path.

    Example:
        >>> with temporary_directory("llvmenv-git-check") as tmp:
        ...     (tmp / 'file.txt').write_text('test')
    """
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))

    try:
        yield temp_dir
    finally:
        if temp_dir.exists():
            shutil.rmtree(temp_dir, ignore_errors=True)
