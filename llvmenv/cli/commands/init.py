"""
Init command implementation.

Writes the default entry.yaml into the configuration directory.
"""

import logging

from llvmenv.cli.utils import get_paths
from llvmenv.config import init_config

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the init command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    entry_file = init_config(get_paths())
    print(entry_file)
    return 0
