"""
Typed descriptors of remote LLVM/Clang sources.

A descriptor is exactly one of Subversion, GitRepository or Archive; consumers
dispatch on the concrete type.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Subversion:
    """A Subversion repository, checked out at HEAD."""

    url: str

    def __str__(self) -> str:
        return f"svn {self.url}"


@dataclass(frozen=True)
class GitRepository:
    """
    A Git repository.

    Attributes:
        url: Clone URL without fragment
        branch: Branch to check out; None uses the remote default
    """

    url: str
    branch: Optional[str] = None

    def __str__(self) -> str:
        if self.branch:
            return f"git {self.url} (branch {self.branch})"
        return f"git {self.url}"


@dataclass(frozen=True)
class Archive:
    """A compressed tar archive of a source tree."""

    url: str

    def __str__(self) -> str:
        return f"archive {self.url}"


ResourceDescriptor = Union[Subversion, GitRepository, Archive]
