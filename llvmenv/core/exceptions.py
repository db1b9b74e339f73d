"""
Centralized exception hierarchy for llvmenv.

Every failure raised by the resource, build and configuration layers derives
from LlvmenvError so the CLI can map them to exit codes in one place.
"""

from pathlib import Path
from typing import Optional, Sequence, Union


# ============================================================================
# Base Exceptions
# ============================================================================


class LlvmenvError(Exception):
    """Base exception for all llvmenv errors."""

    pass


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceError(LlvmenvError):
    """Base exception for remote resource errors."""

    pass


class UnresolvableURLError(ResourceError):
    """Raised when a URL cannot be classified into a resource kind."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        msg = f"Cannot resolve URL: {url}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class DownloadError(ResourceError):
    """Raised when streaming a remote file fails."""

    pass


# ============================================================================
# External Tool Exceptions
# ============================================================================


class ExternalToolError(LlvmenvError):
    """Base exception for failures of external commands (git, svn, cmake, ...)."""

    def __init__(self, cmd: Sequence[str], message: str):
        self.cmd = list(cmd)
        super().__init__(message)

    @property
    def command_line(self) -> str:
        return " ".join(str(part) for part in self.cmd)


class ExternalToolNotFoundError(ExternalToolError):
    """Raised when the executable of an external command cannot be started."""

    def __init__(self, cmd: Sequence[str]):
        super().__init__(cmd, f"External command not found: {' '.join(map(str, cmd))}")


class ExternalToolNonZeroExitError(ExternalToolError):
    """Raised when an external command exits with a nonzero status."""

    def __init__(self, cmd: Sequence[str], code: int):
        self.code = code
        super().__init__(
            cmd, f"Exit with error-code({code}): {' '.join(map(str, cmd))}"
        )


class ExternalToolTerminatedBySignalError(ExternalToolError):
    """Raised when an external command is killed by a signal."""

    def __init__(self, cmd: Sequence[str], signal: Optional[int] = None):
        self.signal = signal
        super().__init__(cmd, f"Terminated by signal: {' '.join(map(str, cmd))}")


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemIOError(LlvmenvError):
    """Raised when a filesystem operation on a managed path fails."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        super().__init__(message)


class DirectoryCreationError(FilesystemIOError):
    """Raised when a managed directory cannot be created."""

    pass


# ============================================================================
# Archive Exceptions
# ============================================================================


class ArchiveError(LlvmenvError):
    """Base exception for archive handling errors."""

    pass


class UnsupportedArchiveFormatError(ArchiveError):
    """Archive compression is not supported."""

    pass


class ArchiveUnpackError(ArchiveError):
    """Failed to unpack an archive entry."""

    pass


class InsecureArchiveError(ArchiveUnpackError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Marker / Installation Exceptions
# ============================================================================


class MarkerUnreadableError(LlvmenvError):
    """Raised when a marker file exists but cannot be read."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        msg = f"Cannot read marker file: {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InstallationError(LlvmenvError):
    """Base exception for installation errors."""

    pass


class InstallationNotFoundError(InstallationError):
    """Raised when a named installation does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Build '{name}' does not exist")


class VersionParseError(InstallationError):
    """Raised when the version of an installation cannot be determined."""

    pass


# ============================================================================
# Entry (configuration) Exceptions
# ============================================================================


class EntryError(LlvmenvError):
    """Base exception for entry configuration errors."""

    pass


class EntryNotFoundError(EntryError):
    """Raised when no entry has the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No entries are found: {name}")


class InvalidEntryError(EntryError):
    """Raised when an entry setting is malformed."""

    pass


class ConfigExistsError(EntryError):
    """Raised when initializing a configuration that already exists."""

    pass


class UnsupportedGeneratorError(EntryError):
    """Raised for an unknown CMake generator name."""

    pass
