"""
Remote LLVM/Clang sources: URL classification and fetching.
"""

from .descriptor import Archive, GitRepository, ResourceDescriptor, Subversion
from .fetcher import ResourceFetcher
from .locator import (
    ARCHIVE_SUFFIXES,
    ResourceLocator,
    classify,
    get_filename_from_url,
    probe_git,
)

__all__ = [
    "Archive",
    "GitRepository",
    "ResourceDescriptor",
    "Subversion",
    "ResourceFetcher",
    "ResourceLocator",
    "ARCHIVE_SUFFIXES",
    "classify",
    "get_filename_from_url",
    "probe_git",
]
