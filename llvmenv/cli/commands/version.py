"""
Version command implementation.

Prints the version of the active (or a named) build, e.g. ``6.0.1``, or only
the selected components concatenated (``--major --minor`` gives ``60``).
"""

from llvmenv.cli.utils import get_paths, get_registry, seek_current


def run(args) -> int:
    paths = get_paths()
    if args.name:
        build = get_registry(paths).get(args.name)
    else:
        build = seek_current(paths)

    major, minor, patch = build.version()
    if not (args.major or args.minor or args.patch):
        print(f"{major}.{minor}.{patch}")
        return 0

    parts = []
    if args.major:
        parts.append(str(major))
    if args.minor:
        parts.append(str(minor))
    if args.patch:
        parts.append(str(patch))
    print("".join(parts))
    return 0
