"""
Edit command implementation.

Opens entry.yaml in $EDITOR.
"""

import logging
import os
import shlex

from llvmenv.cli.utils import get_paths, print_error
from llvmenv.config import ENTRY_FILE
from llvmenv.core.process import check_run

logger = logging.getLogger(__name__)


def run(args) -> int:
    editor = os.environ.get("EDITOR")
    if not editor:
        print_error("EDITOR environment variable is not set")
        return 1
    check_run(shlex.split(editor) + [get_paths().config_dir / ENTRY_FILE])
    return 0
