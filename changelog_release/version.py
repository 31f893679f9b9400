# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Next-version resolution from conventional-commit history.

The version itself is computed by an external conventional-commits tool;
this module runs it and validates its output against SemVer 2.0.0.

References:
    - Semantic Versioning 2.0.0: https://semver.org/
    - Conventional Commits: https://www.conventionalcommits.org/
    - convco: https://github.com/convco/convco
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from changelog_release.errors import VersionError
from changelog_release.process import split_command

if TYPE_CHECKING:
    from changelog_release.process import CommandRunner

logger = logging.getLogger(__name__)

# SemVer 2.0.0 grammar: no leading zeros in numeric identifiers
SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# Characters invalid in git refs
# See: https://git-scm.com/docs/git-check-ref-format
INVALID_PREFIX_CHARS = ["..", "~", "^", ":", "\\", " ", "\t", "\n", "*", "?", "["]

DEFAULT_VERSION_COMMAND = "convco version --bump"


@dataclass(frozen=True)
class Version:
    """A parsed semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __str__(self) -> str:
        """Return the canonical version string (e.g., '1.2.0-rc.1')."""
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse_version(text: str) -> Version:
    """Parse a semantic version string.

    Surrounding whitespace and a single leading 'v' are tolerated, since
    version tools commonly print either.

    Args:
        text: Version string (e.g., '1.2.0', 'v1.2.0\\n').

    Returns:
        The parsed Version.

    Raises:
        VersionError: If the text is not a SemVer 2.0.0 version.

    Examples:
        >>> parse_version("1.2.0")
        Version(major=1, minor=2, patch=0, prerelease='', build='')
        >>> str(parse_version("v2.0.0-rc.1"))
        '2.0.0-rc.1'
        >>> parse_version("01.2.0")
        Traceback (most recent call last):
        ...
        changelog_release.errors.VersionError: '01.2.0' is not a valid semantic version
    """
    candidate = text.strip()
    if candidate.startswith("v"):
        candidate = candidate[1:]

    match = SEMVER_PATTERN.match(candidate)
    if not match:
        raise VersionError(f"{text.strip()!r} is not a valid semantic version")

    return Version(
        major=int(match.group(1)),
        minor=int(match.group(2)),
        patch=int(match.group(3)),
        prerelease=match.group(4) or "",
        build=match.group(5) or "",
    )


def resolve_version(runner: CommandRunner, command: str | list[str] = DEFAULT_VERSION_COMMAND) -> Version:
    """Compute the next release version with the conventional-commits tool.

    Args:
        runner: CommandRunner bound to the repository.
        command: Version command; must print the next version on stdout.

    Returns:
        The next Version.

    Raises:
        CommandError: If the tool exits non-zero.
        VersionError: If the tool output is not a semantic version.
    """
    output = runner.run(split_command(command))
    version = parse_version(output)
    logger.info("Next version: %s", version)
    return version


def format_tag(version: Version | str, tag_prefix: str = "v") -> str:
    """Return the tag name for a version.

    Examples:
        >>> format_tag(parse_version("1.2.0"))
        'v1.2.0'
    """
    return f"{tag_prefix}{version}"


def validate_prefix(prefix: str) -> bool:
    """Validate that a tag prefix is usable in git ref names.

    Args:
        prefix: The prefix string to validate.

    Returns:
        True if the prefix is non-empty and free of invalid ref characters.

    Examples:
        >>> validate_prefix("v")
        True
        >>> validate_prefix("bad..prefix")
        False

    References:
        - git-check-ref-format: https://git-scm.com/docs/git-check-ref-format
    """
    if not prefix:
        logger.warning("Empty prefix provided")
        return False

    for invalid_char in INVALID_PREFIX_CHARS:
        if invalid_char in prefix:
            logger.warning(
                "Prefix '%s' contains invalid character '%s'",
                prefix,
                repr(invalid_char),
            )
            return False

    return True
