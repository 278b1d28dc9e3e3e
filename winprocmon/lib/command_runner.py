"""One-shot execution of the Windows reporting utilities.

The collector only ever needs the complete output of short-lived commands
(``tasklist``, ``wmic``), so each call spawns the command, waits for it to
exit and hands back stdout and stderr as line sequences.
"""

import os
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import List, Sequence, Union

from ..exceptions import CommandExecutionError

Command = Union[str, Sequence[str]]


@dataclass
class CommandOutput:
    """Captured output of a finished command."""

    command: str
    stdout_lines: List[str] = field(default_factory=list)
    stderr_lines: List[str] = field(default_factory=list)
    returncode: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the command wrote nothing at all to stdout."""
        return not self.stdout_lines

    @property
    def stderr_text(self) -> str:
        """Standard error joined back into one string."""
        return "\n".join(self.stderr_lines)


def _command_text(command: Command) -> str:
    if isinstance(command, str):
        return command
    return subprocess.list2cmdline(list(command))


def _split_command(command: Command):
    if not isinstance(command, str):
        return list(command)
    # CreateProcess takes the raw command line, quoting included
    if os.name == "nt":
        return command
    return shlex.split(command)


def run_command(command: Command) -> CommandOutput:
    """Run ``command`` to completion and capture its output.

    The child process and both pipes are released on every exit path by
    the ``Popen`` context manager. No timeout is applied: a hung command
    blocks the caller.

    Args:
        command: Command line string or argument list

    Returns:
        CommandOutput with decoded stdout and stderr lines

    Raises:
        CommandExecutionError: If the command cannot be spawned or read
    """
    command_text = _command_text(command)
    try:
        args = _split_command(command)
    except ValueError as e:
        raise CommandExecutionError(
            f"Error in executing the command {command_text}",
            details={"command": command_text, "original_error": str(e)},
            cause=e,
        ) from e

    try:
        with subprocess.Popen(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            shell=False,
        ) as process:
            stdout, stderr = process.communicate()
            returncode = process.returncode

    except (OSError, subprocess.SubprocessError) as e:
        raise CommandExecutionError(
            f"Error in executing the command {command_text}",
            details={"command": command_text, "original_error": str(e)},
            cause=e,
        ) from e

    return CommandOutput(
        command=command_text,
        stdout_lines=(stdout or "").splitlines(),
        stderr_lines=(stderr or "").splitlines(),
        returncode=returncode,
    )
