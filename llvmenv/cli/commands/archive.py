"""
Archive and expand command implementations.

Redistribute finished builds as ``NAME.tar.xz`` in the data directory.
"""

from llvmenv.build import expand_archive
from llvmenv.cli.utils import get_paths, get_registry


def run_archive(args) -> int:
    paths = get_paths()
    build = get_registry(paths).get(args.name)
    archive_path = build.archive(paths.data_dir, verbose=args.list_files)
    print(archive_path)
    return 0


def run_expand(args) -> int:
    paths = get_paths()
    expand_archive(args.path, paths.data_dir, verbose=args.list_files)
    return 0
