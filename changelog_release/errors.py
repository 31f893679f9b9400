# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Exception types raised by the release pipeline."""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for release pipeline failures."""


class CommandError(ReleaseError):
    """An external command exited non-zero or could not be started.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process (-1 if it never started).
        stdout: Captured standard output (empty when streamed).
        stderr: Captured standard error (empty when streamed).
    """

    def __init__(
        self,
        command: list[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(str(self))

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        message = f"'{cmd_str}' failed (exit {self.returncode})"
        if self.stderr.strip():
            message += f": {self.stderr.strip()}"
        return message


class VersionError(ReleaseError, ValueError):
    """Version tool output is not a valid semantic version."""


class MarkerNotFoundError(ReleaseError, ValueError):
    """The changelog does not contain the marker to rewrite."""
