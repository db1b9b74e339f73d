"""
Core functionality for llvmenv.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    EnvironmentPaths,
    get_cache_dir,
    get_config_dir,
    get_data_dir,
)

from .exceptions import (
    LlvmenvError,
    ResourceError,
    UnresolvableURLError,
    DownloadError,
    ExternalToolError,
    ExternalToolNotFoundError,
    ExternalToolNonZeroExitError,
    ExternalToolTerminatedBySignalError,
    FilesystemIOError,
    DirectoryCreationError,
    ArchiveError,
    UnsupportedArchiveFormatError,
    ArchiveUnpackError,
    InsecureArchiveError,
    MarkerUnreadableError,
    InstallationError,
    InstallationNotFoundError,
    VersionParseError,
    EntryError,
    EntryNotFoundError,
    InvalidEntryError,
    ConfigExistsError,
    UnsupportedGeneratorError,
)

__all__ = [
    "EnvironmentPaths",
    "get_cache_dir",
    "get_config_dir",
    "get_data_dir",
    "LlvmenvError",
    "ResourceError",
    "UnresolvableURLError",
    "DownloadError",
    "ExternalToolError",
    "ExternalToolNotFoundError",
    "ExternalToolNonZeroExitError",
    "ExternalToolTerminatedBySignalError",
    "FilesystemIOError",
    "DirectoryCreationError",
    "ArchiveError",
    "UnsupportedArchiveFormatError",
    "ArchiveUnpackError",
    "InsecureArchiveError",
    "MarkerUnreadableError",
    "InstallationError",
    "InstallationNotFoundError",
    "VersionParseError",
    "EntryError",
    "EntryNotFoundError",
    "InvalidEntryError",
    "ConfigExistsError",
    "UnsupportedGeneratorError",
]
