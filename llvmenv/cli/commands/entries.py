"""
Entries command implementation.
"""

from llvmenv.cli.utils import get_paths
from llvmenv.config import load_entries


def run(args) -> int:
    for entry in load_entries(get_paths()):
        print(entry.name)
    return 0
