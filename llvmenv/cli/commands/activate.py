"""
Global and local command implementations.

Record which build is active, globally or for a directory tree.
"""

import logging
from pathlib import Path

from llvmenv.cli.utils import get_paths, get_registry, get_resolver

logger = logging.getLogger(__name__)


def run_global(args) -> int:
    paths = get_paths()
    build = get_registry(paths).get(args.name)
    get_resolver(paths).set_global(build)
    return 0


def run_local(args) -> int:
    paths = get_paths()
    build = get_registry(paths).get(args.name)
    directory = args.path or Path.cwd()
    get_resolver(paths).set_local(build, directory)
    return 0
