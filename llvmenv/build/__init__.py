"""
Installed builds: discovery, versions and the active-build resolution.
"""

from .installation import (
    SYSTEM_NAME,
    Installation,
    Version,
    expand_archive,
    parse_version,
)
from .registry import InstallationRegistry
from .resolver import (
    MARKER_NAME,
    BuildEnvironmentResolver,
    read_marker,
    write_marker,
)

__all__ = [
    "SYSTEM_NAME",
    "Installation",
    "Version",
    "expand_archive",
    "parse_version",
    "InstallationRegistry",
    "MARKER_NAME",
    "BuildEnvironmentResolver",
    "read_marker",
    "write_marker",
]
