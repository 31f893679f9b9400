# Copyright (c) 2026 Mark Ferrell. MIT License.
"""The release pipeline.

Steps run strictly in order and each one must succeed before the next
starts:

    1. resolve the next version
    2. regenerate the changelog
    3. rewrite the '[Unreleased]' marker
    4. commit the changelog
    5. run the release tool
    6. create the GitHub release (optional)

A failure raises out of run_pipeline; changes already applied are not
rolled back.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from changelog_release.changelog import (
    DEFAULT_CHANGELOG_COMMAND,
    DEFAULT_MARKER,
    extract_release_notes,
    generate_changelog,
    render_changelog,
    replace_marker,
    update_changelog,
)
from changelog_release.errors import MarkerNotFoundError, ReleaseError
from changelog_release.git import commit_changelog, commit_message
from changelog_release.release import (
    DEFAULT_NO_CONFIRM_FLAG,
    DEFAULT_RELEASE_COMMAND,
    publish_release,
)
from changelog_release.release import release_command as build_release_command
from changelog_release.version import DEFAULT_VERSION_COMMAND, format_tag, resolve_version

if TYPE_CHECKING:
    from changelog_release.github_api import GitHubAPI
    from changelog_release.process import CommandRunner
    from changelog_release.version import Version

logger = logging.getLogger(__name__)


@dataclass
class ReleaseInputs:
    """Resolved configuration for a release run."""

    repo_path: Path = Path(".")
    changelog: Path = Path("CHANGELOG.md")
    debug: bool = False
    dry_run: bool = False
    pause: bool = False
    marker: str = DEFAULT_MARKER
    strict_marker: bool = False
    tag_prefix: str = "v"
    version_command: str = DEFAULT_VERSION_COMMAND
    changelog_command: str = DEFAULT_CHANGELOG_COMMAND
    release_command: str = DEFAULT_RELEASE_COMMAND
    no_confirm_flag: str = DEFAULT_NO_CONFIRM_FLAG
    github_release: bool = False
    token: str = ""
    repository: str = ""

    @property
    def changelog_path(self) -> Path:
        """Changelog location; relative paths are taken from the repository root."""
        return self.repo_path / self.changelog


@dataclass
class ReleaseOutputs:
    """Result of a release run."""

    version: str = ""
    tag: str = ""
    commit_message: str = ""
    replacements: int = 0
    released: bool = False
    github_release_url: str = ""


def _dry_run(
    runner: CommandRunner,
    inputs: ReleaseInputs,
    version: Version,
    outputs: ReleaseOutputs,
) -> ReleaseOutputs:
    """Render the changelog in memory and report what a real run would do."""
    text = render_changelog(runner, inputs.changelog_command)
    _, count = replace_marker(text, version, inputs.marker, inputs.tag_prefix)
    if count == 0:
        if inputs.strict_marker:
            raise MarkerNotFoundError(f"Marker '{inputs.marker}' not found in generated changelog")
        logger.warning("Marker '%s' not found in generated changelog", inputs.marker)
    outputs.replacements = count

    release_args = build_release_command(inputs.release_command, version, inputs.no_confirm_flag)
    logger.info(
        "[DRY-RUN] Would write %s with %d marker replacement(s)",
        inputs.changelog_path,
        count,
    )
    logger.info("[DRY-RUN] Would commit '%s'", outputs.commit_message)
    logger.info("[DRY-RUN] Would run '%s'", shlex.join(release_args))
    if inputs.github_release:
        logger.info("[DRY-RUN] Would create GitHub release '%s'", outputs.tag)
    return outputs


def _create_github_release(api: GitHubAPI, inputs: ReleaseInputs, version: Version, tag: str) -> str:
    text = inputs.changelog_path.read_text(encoding="utf-8")
    notes = extract_release_notes(text, version, inputs.tag_prefix)
    if notes is None:
        logger.warning("No changelog section found for '%s', creating release without notes", tag)
        notes = ""

    url = api.create_release(tag, name=tag, body=notes, prerelease=version.is_prerelease)
    logger.info("Created GitHub release %s", url)
    return url


def run_pipeline(
    runner: CommandRunner,
    inputs: ReleaseInputs,
    api: GitHubAPI | None = None,
) -> ReleaseOutputs:
    """Run the release pipeline.

    Args:
        runner: CommandRunner bound to the repository.
        inputs: Release configuration.
        api: GitHubAPI instance; when given, the tag is checked before any
            change is made and a GitHub release is created at the end.

    Returns:
        ReleaseOutputs describing the release.

    Raises:
        CommandError: If any external tool fails.
        VersionError: If the version tool prints an invalid version.
        MarkerNotFoundError: If strict_marker is set and the marker is missing.
        ReleaseError: If the release tag already exists on GitHub.
        GithubException: If the GitHub release cannot be created.
    """
    outputs = ReleaseOutputs()

    version = resolve_version(runner, inputs.version_command)
    tag = format_tag(version, inputs.tag_prefix)
    outputs.version = str(version)
    outputs.tag = tag
    outputs.commit_message = commit_message(version, inputs.changelog_path)

    if api is not None and api.tag_exists(tag):
        raise ReleaseError(f"Tag '{tag}' already exists on GitHub")

    if inputs.dry_run:
        return _dry_run(runner, inputs, version, outputs)

    generate_changelog(runner, inputs.changelog_path, inputs.changelog_command)
    outputs.replacements = update_changelog(
        inputs.changelog_path,
        version,
        marker=inputs.marker,
        tag_prefix=inputs.tag_prefix,
        strict=inputs.strict_marker,
    )

    commit_changelog(runner, version, inputs.changelog_path)

    publish_release(runner, version, inputs.release_command, inputs.no_confirm_flag)
    outputs.released = True

    if api is not None:
        outputs.github_release_url = _create_github_release(api, inputs, version, tag)

    return outputs
