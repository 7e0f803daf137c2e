"""Subprocess execution for package manager commands."""

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from .errors import ProbeError
from .models import CommandResult

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 120.0


class CommandRunner(Protocol):
    def __call__(
        self,
        args: list[str],
        cwd: str | Path,
        merge_stderr: bool = False,
    ) -> CommandResult: ...


def run_command(
    args: list[str],
    cwd: str | Path = ".",
    merge_stderr: bool = False,
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> CommandResult:
    """Run a command and capture its output without checking the exit code.

    Package managers exit nonzero whenever they report dependency problems,
    so a nonzero exit still yields a CommandResult with the captured output.

    Args:
        args: Command and arguments
        cwd: Working directory
        merge_stderr: Interleave stderr into stdout
        timeout: Seconds before the process is killed

    Returns:
        The exit code and decoded output

    Raises:
        ProbeError: If the command cannot be started or times out
    """
    logger.debug("Running %s in %s", " ".join(args), cwd)
    try:
        completed = subprocess.run(
            args,
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise ProbeError(f"{args[0]} is not installed or not on PATH") from e
    except PermissionError as e:
        raise ProbeError(f"Permission denied running {args[0]}") from e
    except subprocess.TimeoutExpired as e:
        raise ProbeError(f"{' '.join(args)} timed out after {timeout:g}s") from e

    if completed.returncode != 0:
        logger.debug("%s exited with %d", args[0], completed.returncode)

    return CommandResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
