# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Subprocess wrapper for the external tools the pipeline drives.

All commands run inside the configured repository directory and are
checked: a non-zero exit raises CommandError so the pipeline stops at the
failing step.

References:
    - subprocess.run: https://docs.python.org/3/library/subprocess.html#subprocess.run
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from changelog_release.errors import CommandError

logger = logging.getLogger(__name__)


def split_command(command: str | list[str]) -> list[str]:
    """Split a configured command string into an argument list.

    Args:
        command: Shell-style command string (e.g., 'convco version --bump')
            or an already split argument list.

    Returns:
        List of arguments.

    Raises:
        ValueError: If the command is empty.

    Examples:
        >>> split_command("cargo release")
        ['cargo', 'release']
    """
    args = shlex.split(command) if isinstance(command, str) else list(command)
    if not args:
        raise ValueError("Command must not be empty")
    return args


class CommandRunner:
    """Runs external commands in a fixed working directory."""

    def __init__(self, cwd: Path | str = ".") -> None:
        """Initialize the runner.

        Args:
            cwd: Working directory for every command (the repository root).
        """
        self._cwd = Path(cwd)

    @property
    def cwd(self) -> Path:
        return self._cwd

    def run(self, args: list[str], input_text: str | None = None) -> str:
        """Run a command and return its standard output.

        Output is decoded as UTF-8 whatever the locale.

        Args:
            args: Command and arguments.
            input_text: Optional text written to the command's standard input.

        Returns:
            Captured standard output.

        Raises:
            CommandError: If the command exits non-zero, cannot be started,
                or writes output that is not valid UTF-8.
        """
        logger.debug("Running: %s (cwd=%s)", shlex.join(args), self._cwd)
        try:
            proc = subprocess.run(
                args,
                cwd=str(self._cwd),
                input=input_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as e:
            raise CommandError(args, -1, stderr=str(e)) from e
        except UnicodeDecodeError as e:
            raise CommandError(args, -1, stderr=f"output is not valid UTF-8: {e}") from e

        if proc.returncode != 0:
            raise CommandError(args, proc.returncode, proc.stdout, proc.stderr)
        return proc.stdout

    def stream(self, args: list[str], input_text: str | None = None) -> None:
        """Run a command with its output going straight to the terminal.

        Used for tools whose progress the operator should watch.

        Args:
            args: Command and arguments.
            input_text: Optional text written to the command's standard input.

        Raises:
            CommandError: If the command exits non-zero or cannot be started.
        """
        logger.debug("Running: %s (cwd=%s)", shlex.join(args), self._cwd)
        try:
            proc = subprocess.run(
                args,
                cwd=str(self._cwd),
                input=input_text,
                text=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as e:
            raise CommandError(args, -1, stderr=str(e)) from e

        if proc.returncode != 0:
            raise CommandError(args, proc.returncode)
