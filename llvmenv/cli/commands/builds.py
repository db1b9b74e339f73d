"""
Builds command implementation.

Lists the system build and every installed build with its prefix.
"""

import logging

from llvmenv.cli.utils import get_paths, get_registry

logger = logging.getLogger(__name__)


def run(args) -> int:
    builds = get_registry(get_paths()).list()
    width = max(len(build.name) for build in builds)
    for build in builds:
        print(f"{build.name:<{width}}: {build.prefix}")
    return 0
