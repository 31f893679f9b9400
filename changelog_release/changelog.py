# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Changelog generation and marker rewriting.

The changelog is produced wholesale by the conventional-commits tool and
then treated as opaque text with a single substitution point: the
'[Unreleased]' marker, rewritten to the bracketed release tag.

References:
    - Keep a Changelog: https://keepachangelog.com/en/1.1.0/
    - convco changelog: https://convco.github.io/
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from changelog_release.errors import MarkerNotFoundError
from changelog_release.process import split_command
from changelog_release.version import format_tag

if TYPE_CHECKING:
    from changelog_release.process import CommandRunner
    from changelog_release.version import Version

logger = logging.getLogger(__name__)

DEFAULT_CHANGELOG_COMMAND = "convco changelog"
DEFAULT_MARKER = "[Unreleased]"

# Level-2 heading, the boundary between release sections
SECTION_HEADING_PATTERN = re.compile(r"^##\s", re.MULTILINE)


def _read_text(path: Path) -> str:
    # newline="" keeps line endings exactly as stored
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_text(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def render_changelog(runner: CommandRunner, command: str | list[str] = DEFAULT_CHANGELOG_COMMAND) -> str:
    """Run the changelog tool and return its output without writing it."""
    return runner.run(split_command(command))


def generate_changelog(
    runner: CommandRunner,
    path: Path,
    command: str | list[str] = DEFAULT_CHANGELOG_COMMAND,
) -> str:
    """Regenerate the changelog file from commit history.

    The file is overwritten with the tool's full output, never appended to.

    Args:
        runner: CommandRunner bound to the repository.
        path: Changelog file to overwrite.
        command: Changelog command; must print the full changelog on stdout.

    Returns:
        The text written to the file.

    Raises:
        CommandError: If the tool exits non-zero. The file is left untouched.
    """
    text = render_changelog(runner, command)
    _write_text(path, text)
    logger.info("Wrote changelog to %s (%d bytes)", path, len(text.encode("utf-8")))
    return text


def replace_marker(
    text: str,
    version: Version | str,
    marker: str = DEFAULT_MARKER,
    tag_prefix: str = "v",
) -> tuple[str, int]:
    """Replace every occurrence of the marker with the bracketed release tag.

    Args:
        text: Changelog content.
        version: Release version.
        marker: Literal placeholder to replace.
        tag_prefix: Prefix for the release tag.

    Returns:
        Tuple of (new text, number of replacements).

    Examples:
        >>> replace_marker("## [Unreleased]\\n", "1.2.0")
        ('## [v1.2.0]\\n', 1)
        >>> replace_marker("## [v1.1.0]\\n", "1.2.0")
        ('## [v1.1.0]\\n', 0)
    """
    count = text.count(marker)
    if count == 0:
        return text, 0
    replacement = f"[{format_tag(version, tag_prefix)}]"
    return text.replace(marker, replacement), count


def update_changelog(
    path: Path,
    version: Version | str,
    marker: str = DEFAULT_MARKER,
    tag_prefix: str = "v",
    strict: bool = False,
) -> int:
    """Rewrite the marker in the changelog file in place.

    A changelog without the marker is left byte-identical. That is logged
    as a warning, or raised when strict is set.

    Args:
        path: Changelog file.
        version: Release version.
        marker: Literal placeholder to replace.
        tag_prefix: Prefix for the release tag.
        strict: Raise instead of warning when the marker is missing.

    Returns:
        Number of replacements made.

    Raises:
        MarkerNotFoundError: If strict is set and the marker is missing.
        OSError: If the file cannot be read or written.
    """
    text = _read_text(path)
    new_text, count = replace_marker(text, version, marker, tag_prefix)

    if count == 0:
        if strict:
            raise MarkerNotFoundError(f"Marker '{marker}' not found in {path}")
        logger.warning("Marker '%s' not found in %s, changelog left unchanged", marker, path)
        return 0

    _write_text(path, new_text)
    logger.info("Replaced %d occurrence(s) of '%s' in %s", count, marker, path.name)
    return count


def extract_release_notes(text: str, version: Version | str, tag_prefix: str = "v") -> str | None:
    """Return the body of the changelog section for a release.

    The section starts at the level-2 heading carrying '[<tag>]' and ends
    at the next level-2 heading.

    Args:
        text: Changelog content after the marker was rewritten.
        version: Release version.
        tag_prefix: Prefix for the release tag.

    Returns:
        The stripped section body, or None if no heading matches.

    Examples:
        >>> extract_release_notes("## [v1.2.0]\\n- fix\\n## [v1.1.0]\\n- old\\n", "1.2.0")
        '- fix'
    """
    tag = format_tag(version, tag_prefix)
    heading = re.compile(rf"^##\s+\[{re.escape(tag)}\].*$", re.MULTILINE)
    match = heading.search(text)
    if match is None:
        return None

    rest = text[match.end() :]
    next_heading = SECTION_HEADING_PATTERN.search(rest)
    body = rest[: next_heading.start()] if next_heading else rest
    return body.strip()
