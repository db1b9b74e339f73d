"""
llvmenv CLI argument parser.

This module implements the command-line interface for llvmenv using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from llvmenv import __version__
from llvmenv.core.exceptions import LlvmenvError

logger = logging.getLogger(__name__)

# command -> (module, handler)
COMMAND_MAP = {
    "init": ("llvmenv.cli.commands.init", "run"),
    "builds": ("llvmenv.cli.commands.builds", "run"),
    "entries": ("llvmenv.cli.commands.entries", "run"),
    "build-entry": ("llvmenv.cli.commands.build_entry", "run"),
    "current": ("llvmenv.cli.commands.current", "run_current"),
    "prefix": ("llvmenv.cli.commands.current", "run_prefix"),
    "version": ("llvmenv.cli.commands.version", "run"),
    "global": ("llvmenv.cli.commands.activate", "run_global"),
    "local": ("llvmenv.cli.commands.activate", "run_local"),
    "archive": ("llvmenv.cli.commands.archive", "run_archive"),
    "expand": ("llvmenv.cli.commands.archive", "run_expand"),
    "edit": ("llvmenv.cli.commands.edit", "run"),
    "zsh": ("llvmenv.cli.commands.zsh", "run"),
}


class CLI:
    """llvmenv command-line interface."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="llvmenv",
            description="Manage multiple LLVM/Clang builds",
            epilog='Use "llvmenv COMMAND --help" for command-specific help',
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"llvmenv {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        subparsers.add_parser("init", help="Initialize llvmenv")
        subparsers.add_parser("builds", help="List usable builds")
        subparsers.add_parser("entries", help="List entries to be built")
        self._add_build_entry_command(subparsers)

        for name, help_text in (
            ("current", "Show the name of the current build"),
            ("prefix", "Show the prefix of the current build"),
        ):
            sub = subparsers.add_parser(name, help=help_text)
            sub.add_argument(
                "--verbose",
                "-v",
                dest="show_origin",
                action="store_true",
                help="Show which marker file selected the build",
            )

        self._add_version_command(subparsers)

        global_parser = subparsers.add_parser("global", help="Set the build to use (global)")
        global_parser.add_argument("name", help="Name of the build")

        local_parser = subparsers.add_parser("local", help="Set the build to use (local)")
        local_parser.add_argument("name", help="Name of the build")
        local_parser.add_argument(
            "--path",
            "-p",
            type=Path,
            metavar="PATH",
            help="Directory to write the setting into (default: current directory)",
        )

        archive_parser = subparsers.add_parser(
            "archive", help="Archive a build into NAME.tar.xz"
        )
        archive_parser.add_argument("name", help="Name of the build")
        archive_parser.add_argument(
            "--verbose", "-v", dest="list_files", action="store_true",
            help="List archived files",
        )

        expand_parser = subparsers.add_parser("expand", help="Expand an archived build")
        expand_parser.add_argument("path", type=Path, help="Archive to expand")
        expand_parser.add_argument(
            "--verbose", "-v", dest="list_files", action="store_true",
            help="List expanded files",
        )

        subparsers.add_parser("edit", help="Edit llvmenv configuration in your editor")
        subparsers.add_parser("zsh", help="Setup Zsh integration")

        return parser

    def _add_build_entry_command(self, subparsers):
        """Add 'build-entry' subcommand."""
        parser = subparsers.add_parser(
            "build-entry",
            help="Build LLVM/Clang",
            description="Fetch, compile and install the sources of an entry",
        )
        parser.add_argument("name", help="Name of the entry")
        parser.add_argument(
            "--update", "-u", action="store_true", help="Update sources before building"
        )
        parser.add_argument(
            "--clean", "-c", action="store_true", help="Remove the build directory first"
        )
        parser.add_argument(
            "--nproc", "-j", type=int, metavar="N", help="Number of parallel jobs"
        )
        parser.add_argument(
            "--builder",
            "-G",
            metavar="GENERATOR",
            help="CMake generator (Makefile, Ninja, VisualStudio)",
        )

    def _add_version_command(self, subparsers):
        """Add 'version' subcommand."""
        parser = subparsers.add_parser(
            "version", help="Show the base version of the current build"
        )
        parser.add_argument("--name", "-n", metavar="NAME", help="Name of the build")
        parser.add_argument("--major", action="store_true", help="Show major version")
        parser.add_argument("--minor", action="store_true", help="Show minor version")
        parser.add_argument("--patch", action="store_true", help="Show patch version")

    def parse_args(self, args: Optional[List[str]] = None):
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Parse ``args`` and run the selected command.

        Library errors are logged and turned into exit code 1, an interrupt
        into 130.
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except LlvmenvError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """Route library logging to stderr; -v shows debug output, -q only errors."""
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        target = COMMAND_MAP.get(args.command)
        if not target:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module_name, handler_name = target
        module = importlib.import_module(module_name)
        handler = getattr(module, handler_name, None)
        if handler is None:
            logger.error(f"Command module {module_name} has no {handler_name}() function")
            return 1

        return handler(args)


def main():
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
