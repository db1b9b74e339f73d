"""
Build-entry command implementation.

Fetches the sources of an entry, optionally updates them, then configures,
compiles and installs the build into the data directory.
"""

import logging
import os

from llvmenv.cli.utils import get_paths
from llvmenv.config import load_entry
from llvmenv.core.download import DownloadProgress

logger = logging.getLogger(__name__)


def _log_progress(progress: DownloadProgress) -> None:
    logger.info(f"  {progress}")


def run(args) -> int:
    """
    Run the build-entry command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    entry = load_entry(get_paths(), args.name)
    if args.builder:
        entry.set_builder(args.builder)
    nproc = args.nproc or os.cpu_count() or 1
    entry.fetcher.progress_callback = _log_progress

    logger.debug(f"Building {entry!r} with {nproc} jobs")
    entry.checkout()
    if args.update:
        entry.update()
    if args.clean:
        entry.clean_build_dir()
    entry.build(nproc)
    return 0
