# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Invocation of the external release tool.

This is the irreversible step: the release tool tags and publishes the
version. It must run non-interactively, either through the tool's own
no-confirm flag or, for tools without one, by answering its prompt.

References:
    - cargo-release: https://github.com/crate-ci/cargo-release
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from changelog_release.process import split_command

if TYPE_CHECKING:
    from changelog_release.process import CommandRunner
    from changelog_release.version import Version

logger = logging.getLogger(__name__)

DEFAULT_RELEASE_COMMAND = "cargo release"
DEFAULT_NO_CONFIRM_FLAG = "--no-confirm"

# Answer fed to the confirmation prompt when no flag is configured
CONFIRMATION_ANSWER = "y\n"


def release_command(
    command: str | list[str],
    version: Version | str,
    no_confirm_flag: str = DEFAULT_NO_CONFIRM_FLAG,
) -> list[str]:
    """Build the release tool argument list.

    Examples:
        >>> release_command("cargo release", "1.2.0")
        ['cargo', 'release', '--execute', '--no-confirm', '1.2.0']
        >>> release_command("cargo release", "1.2.0", no_confirm_flag="")
        ['cargo', 'release', '--execute', '1.2.0']
    """
    args = split_command(command)
    args.append("--execute")
    if no_confirm_flag:
        args.append(no_confirm_flag)
    args.append(str(version))
    return args


def publish_release(
    runner: CommandRunner,
    version: Version | str,
    command: str | list[str] = DEFAULT_RELEASE_COMMAND,
    no_confirm_flag: str = DEFAULT_NO_CONFIRM_FLAG,
) -> None:
    """Run the release tool for a version.

    The tool's output is streamed to the terminal.

    Args:
        runner: CommandRunner bound to the repository.
        version: Version to release.
        command: Release tool command (without '--execute').
        no_confirm_flag: Flag that suppresses the confirmation prompt. When
            empty, the prompt is answered with 'y' on standard input.

    Raises:
        CommandError: If the release tool exits non-zero.
    """
    args = release_command(command, version, no_confirm_flag)
    input_text = None if no_confirm_flag else CONFIRMATION_ANSWER

    logger.info("Releasing %s", version)
    runner.stream(args, input_text=input_text)
    logger.info("Released %s", version)
