"""Shared pytest fixtures for the test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from changelog_release.errors import CommandError
from changelog_release.pipeline import ReleaseInputs

SAMPLE_CHANGELOG = """# Changelog

## [Unreleased]

### Features

- add release automation

## [v1.1.0] - 2026-01-02

### Bug Fixes

- handle empty tag list
"""


def make_runner(
    version: str = "1.2.0",
    changelog: str = SAMPLE_CHANGELOG,
    fail: list[str] | None = None,
    returncode: int = 1,
) -> MagicMock:
    """Create a mock CommandRunner answering the default tool commands.

    Args:
        version: Text printed by the version command (newline appended).
        changelog: Text printed by the changelog command.
        fail: Command prefix that should fail with CommandError.
        returncode: Exit code of the failing command.
    """

    def respond(args: list[str], input_text: str | None = None) -> str:
        if fail is not None and args[: len(fail)] == fail:
            raise CommandError(args, returncode, stderr="simulated failure")
        if args[:2] == ["convco", "version"]:
            return f"{version}\n"
        if args[:2] == ["convco", "changelog"]:
            return changelog
        return ""

    runner = MagicMock()
    runner.run.side_effect = respond
    runner.stream.side_effect = respond
    return runner


def called_commands(runner: MagicMock) -> list[list[str]]:
    """Return every command given to a mock runner, in call order."""
    return [c.args[0] for c in runner.method_calls if c[0] in ("run", "stream")]


@pytest.fixture
def mock_runner() -> MagicMock:
    """Mock CommandRunner resolving version 1.2.0 and the sample changelog."""
    return make_runner()


@pytest.fixture
def mock_github_api() -> MagicMock:
    """Create a mock GitHubAPI instance for unit tests."""
    mock_api = MagicMock()
    mock_api.tag_exists.return_value = False
    mock_api.create_release.return_value = "https://github.com/owner/repo/releases/tag/v1.2.0"
    return mock_api


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """Empty directory standing in for the repository root."""
    repo = tmp_path / "repo"
    repo.mkdir()
    return repo


@pytest.fixture
def inputs(repo_dir: Path) -> ReleaseInputs:
    """Default release inputs rooted at the temporary repository."""
    return ReleaseInputs(repo_path=repo_dir)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that feed parse_inputs defaults."""
    for name in (
        "INPUT_REPO_PATH",
        "INPUT_CHANGELOG",
        "INPUT_MARKER",
        "INPUT_STRICT_MARKER",
        "INPUT_TAG_PREFIX",
        "INPUT_VERSION_COMMAND",
        "INPUT_CHANGELOG_COMMAND",
        "INPUT_RELEASE_COMMAND",
        "INPUT_NO_CONFIRM_FLAG",
        "INPUT_GITHUB_RELEASE",
        "INPUT_TOKEN",
        "INPUT_REPOSITORY",
        "INPUT_DRY_RUN",
        "INPUT_DEBUG",
        "INPUT_PAUSE",
        "GITHUB_TOKEN",
        "GITHUB_REPOSITORY",
        "GITHUB_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)
