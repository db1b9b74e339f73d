"""
Current and prefix command implementations.

Both resolve the active build for the current directory.
"""

from llvmenv.cli.utils import get_paths, print_marker_origin, seek_current


def run_current(args) -> int:
    build = seek_current(get_paths())
    print(build.name)
    if args.show_origin:
        print_marker_origin(build)
    return 0


def run_prefix(args) -> int:
    build = seek_current(get_paths())
    print(build.prefix)
    if args.show_origin:
        print_marker_origin(build)
    return 0
