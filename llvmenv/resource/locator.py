"""
Classification of resource URLs.

``classify`` maps an arbitrary URL to a Subversion, GitRepository or Archive
descriptor with an ordered chain of heuristics; the first match wins:

1. archive suffix of the final path segment
2. final path segment ending in ``trunk`` (Subversion)
3. final path segment ending in ``.git``
4. well-known Git hosting services
5. the llvm.org ``/svn`` and ``/git`` paths
6. probing the URL with ``git ls-remote`` in a throwaway repository

Steps 1-5 depend only on the URL. Step 6 depends on network reachability.
"""

import logging
from typing import Optional
from urllib.parse import urldefrag, urlparse

from ..core.exceptions import ExternalToolError, UnresolvableURLError
from ..core.filesystem import temporary_directory
from ..core.process import check_run
from .descriptor import Archive, GitRepository, ResourceDescriptor, Subversion

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".tar.gz", ".tar.xz", ".tar.bz2", ".tar.Z", ".tgz", ".taz")
GIT_HOSTS = frozenset({"github.com", "gitlab.com", "bitbucket.org"})
LLVM_HOST = "llvm.org"


def get_filename_from_url(url: str) -> str:
    """
    Return the final path segment of a URL.

    Example:
        >>> get_filename_from_url("http://releases.llvm.org/6.0.1/llvm-6.0.1.src.tar.xz")
        'llvm-6.0.1.src.tar.xz'

    Raises:
        UnresolvableURLError: If the string is not an absolute URL
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise UnresolvableURLError(url, "not an absolute URL")
    return parsed.path.rsplit("/", 1)[-1]


def _git(url: str, branch_override: Optional[str]) -> GitRepository:
    """Build a Git descriptor; an explicit branch beats the URL fragment."""
    base, fragment = urldefrag(url)
    return GitRepository(url=base, branch=branch_override or fragment or None)


def probe_git(url: str) -> bool:
    """
    Check whether ``url`` answers as a Git remote.

    A throwaway repository is initialized, ``url`` is added as its remote and
    listed with ``git ls-remote``. The temporary directory is removed on every
    exit path.

    Returns:
        True if the listing succeeds, False if the listing itself fails

    Raises:
        ExternalToolError: If initializing the repository or adding the remote
            fails (these are setup failures, not a classification signal)
    """
    remote, _ = urldefrag(url)
    with temporary_directory(prefix="llvmenv-git-check") as work:
        check_run(["git", "init"], cwd=work, silent=True)
        check_run(["git", "remote", "add", "origin", remote], cwd=work, silent=True)
        try:
            check_run(["git", "ls-remote", "origin"], cwd=work, silent=True)
        except ExternalToolError as e:
            logger.info(f"Try access with git to {url} but fails: {e}")
            return False
    return True


class ResourceLocator:
    """
    Classify URLs into resource descriptors.

    The Git probe is injectable so callers (and tests) can replace the
    network-dependent last step.

    Example:
        >>> ResourceLocator().classify("https://github.com/llvm/llvm-project.git#release/8.x")
        GitRepository(url='https://github.com/llvm/llvm-project.git', branch='release/8.x')
    """

    def __init__(self, git_probe=probe_git):
        self.git_probe = git_probe

    def classify(self, url: str, branch: Optional[str] = None) -> ResourceDescriptor:
        """
        Classify ``url``.

        Args:
            url: Resource URL; for Git a ``#fragment`` names the branch
            branch: Branch override, takes precedence over the fragment

        Raises:
            UnresolvableURLError: If ``url`` is not an absolute URL
            ExternalToolError: If the Git probe cannot be set up
        """
        filename = get_filename_from_url(url)

        if filename.endswith(ARCHIVE_SUFFIXES):
            return Archive(url)
        if filename.endswith("trunk"):
            return Subversion(url)
        if filename.endswith(".git"):
            return _git(url, branch)

        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        if host in GIT_HOSTS:
            return _git(url, branch)
        if host == LLVM_HOST:
            if parsed.path.startswith("/svn"):
                return Subversion(url)
            if parsed.path.startswith("/git"):
                return _git(url, branch)

        logger.debug(f"No static rule matched {url}, probing with git")
        if self.git_probe(url):
            return _git(url, branch)
        return Subversion(url)


def classify(url: str, branch: Optional[str] = None) -> ResourceDescriptor:
    """Classify ``url`` with the default locator."""
    return ResourceLocator().classify(url, branch)
