# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Committing the regenerated changelog.

References:
    - git-add: https://git-scm.com/docs/git-add
    - git-commit: https://git-scm.com/docs/git-commit
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from changelog_release.process import CommandRunner
    from changelog_release.version import Version

logger = logging.getLogger(__name__)


def commit_message(version: Version | str, changelog_path: Path | str = "CHANGELOG.md") -> str:
    """Return the changelog commit message for a release.

    Examples:
        >>> commit_message("2.0.0")
        'docs: 2.0.0 CHANGELOG.md'
    """
    return f"docs: {version} {Path(changelog_path).name}"


def commit_changelog(
    runner: CommandRunner,
    version: Version | str,
    changelog_path: Path | str = "CHANGELOG.md",
) -> str:
    """Stage all pending changes and commit them.

    Args:
        runner: CommandRunner bound to the repository.
        version: Release version, embedded in the message.
        changelog_path: Changelog file, whose name is embedded in the message.

    Returns:
        The commit message used.

    Raises:
        CommandError: If staging fails, there is nothing to commit, or the
            repository state prevents committing.
    """
    message = commit_message(version, changelog_path)
    runner.run(["git", "add", "--all"])
    runner.run(["git", "commit", "-m", message])
    logger.info("Committed '%s'", message)
    return message
