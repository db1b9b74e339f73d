"""
External command execution with strict exit status reporting.

Every invocation of git, svn, cmake or an installed compiler goes through this
module so that a missing executable, a nonzero exit and termination by a signal
are always reported as distinct errors instead of being ignored.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .exceptions import (
    ExternalToolNonZeroExitError,
    FilesystemIOError,
    ExternalToolNotFoundError,
    ExternalToolTerminatedBySignalError,
)

logger = logging.getLogger(__name__)

Command = Sequence[Union[str, Path]]


def _normalize(cmd: Command) -> List[str]:
    return [str(part) for part in cmd]


def _check_cwd(cwd: Optional[Path]) -> None:
    # A bad cwd would otherwise surface as a missing executable
    if cwd is not None and not Path(cwd).is_dir():
        raise FilesystemIOError(Path(cwd), f"Working directory is not a directory: {cwd}")


def _check_status(cmd: List[str], returncode: int) -> None:
    """
    Translate a process return code into an exception.

    On POSIX a negative return code means the child was killed by the
    signal of that number.
    """
    if returncode == 0:
        return
    if returncode < 0:
        raise ExternalToolTerminatedBySignalError(cmd, signal=-returncode)
    raise ExternalToolNonZeroExitError(cmd, returncode)


def check_run(
    cmd: Command,
    cwd: Optional[Path] = None,
    silent: bool = False,
) -> None:
    """
    Run a command and block until it finishes.

    Args:
        cmd: Command line as a sequence of arguments
        cwd: Working directory for the command
        silent: If True, discard stdout and stderr

    Raises:
        ExternalToolNotFoundError: If the executable cannot be started
        FilesystemIOError: If ``cwd`` is not an existing directory
        ExternalToolNonZeroExitError: If the command exits with nonzero status
        ExternalToolTerminatedBySignalError: If the command is killed by a signal

    Example:
        >>> check_run(["git", "init"], cwd=Path("/tmp/repo"), silent=True)
    """
    argv = _normalize(cmd)
    logger.debug(f"Run: {' '.join(argv)}" + (f" (in {cwd})" if cwd else ""))

    _check_cwd(cwd)
    output = subprocess.DEVNULL if silent else None
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            stdout=output,
            stderr=output,
            check=False,
        )
    except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
        logger.debug(f"Cannot start {argv[0]}: {e}")
        raise ExternalToolNotFoundError(argv) from e

    _check_status(argv, result.returncode)


def capture_output(cmd: Command, cwd: Optional[Path] = None) -> str:
    """
    Run a command and return its standard output as text.

    Raises the same errors as check_run().
    """
    argv = _normalize(cmd)
    logger.debug(f"Capture: {' '.join(argv)}")
    _check_cwd(cwd)

    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except (FileNotFoundError, PermissionError, NotADirectoryError) as e:
        logger.debug(f"Cannot start {argv[0]}: {e}")
        raise ExternalToolNotFoundError(argv) from e

    _check_status(argv, result.returncode)
    return result.stdout
