# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Integration tests for the changelog release tool.

These tests drive main() end to end with the real CommandRunner and a
faked subprocess layer standing in for convco, git and cargo-release.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from github.GithubException import GithubException

from changelog_release.main import main
from tests.conftest import SAMPLE_CHANGELOG


class FakeTools:
    """Records subprocess.run calls and answers like the external tools."""

    def __init__(self, version: str = "1.2.0", changelog: str = SAMPLE_CHANGELOG) -> None:
        self.version = version
        self.changelog = changelog
        self.calls: list[dict[str, Any]] = []
        self.failures: dict[tuple[str, ...], int] = {}
        self.changelog_at_commit: str | None = None

    def fail(self, *prefix: str, returncode: int = 1) -> None:
        self.failures[prefix] = returncode

    def __call__(self, args: list[str], **kwargs: Any) -> MagicMock:
        self.calls.append({"args": list(args), **kwargs})
        proc = MagicMock(returncode=0, stdout="", stderr="")

        for prefix, returncode in self.failures.items():
            if tuple(args[: len(prefix)]) == prefix:
                proc.returncode = returncode
                proc.stderr = f"{args[0]}: simulated failure"
                return proc

        if args[:2] == ["convco", "version"]:
            proc.stdout = f"{self.version}\n"
        elif args[:2] == ["convco", "changelog"]:
            proc.stdout = self.changelog
        elif args[:2] == ["git", "commit"]:
            self.changelog_at_commit = (Path(kwargs["cwd"]) / "CHANGELOG.md").read_text(encoding="utf-8")
        return proc

    @property
    def commands(self) -> list[list[str]]:
        return [call["args"] for call in self.calls]


@pytest.fixture
def tools() -> FakeTools:
    return FakeTools()


@pytest.mark.usefixtures("clean_env")
class TestEndToEnd:
    """Full release runs through main()."""

    def test_release_with_prompt_answer(self, tools: FakeTools, repo_dir: Path) -> None:
        """Bump to 1.2.0, rewrite the marker, commit, release with 'y' answered."""
        (repo_dir / "CHANGELOG.md").write_text("# Changelog\n\nold content\n", encoding="utf-8")

        with patch("changelog_release.process.subprocess.run", side_effect=tools):
            main(["--repo-path", str(repo_dir), "--no-confirm-flag", ""])

        content = (repo_dir / "CHANGELOG.md").read_text(encoding="utf-8")
        assert "## [v1.2.0]" in content
        assert "[Unreleased]" not in content
        assert "old content" not in content

        assert tools.commands == [
            ["convco", "version", "--bump"],
            ["convco", "changelog"],
            ["git", "add", "--all"],
            ["git", "commit", "-m", "docs: 1.2.0 CHANGELOG.md"],
            ["cargo", "release", "--execute", "1.2.0"],
        ]
        assert tools.calls[-1]["input"] == "y\n"
        assert tools.changelog_at_commit == content
        assert all(call["cwd"] == str(repo_dir) for call in tools.calls)

    def test_release_with_no_confirm_flag(self, tools: FakeTools, repo_dir: Path) -> None:
        """By default the release tool's own no-confirm flag is used."""
        with patch("changelog_release.process.subprocess.run", side_effect=tools):
            main(["--repo-path", str(repo_dir)])

        assert tools.commands[-1] == ["cargo", "release", "--execute", "--no-confirm", "1.2.0"]
        assert tools.calls[-1]["input"] is None

    def test_version_failure_exits_with_tool_code(self, tools: FakeTools, repo_dir: Path) -> None:
        """A failing version tool aborts with its exit code and nothing else runs."""
        tools.fail("convco", "version", returncode=3)

        with patch("changelog_release.process.subprocess.run", side_effect=tools):
            with pytest.raises(SystemExit) as exc_info:
                main(["--repo-path", str(repo_dir)])

        assert exc_info.value.code == 3
        assert tools.commands == [["convco", "version", "--bump"]]
        assert not (repo_dir / "CHANGELOG.md").exists()

    def test_nothing_to_commit_blocks_release(self, tools: FakeTools, repo_dir: Path) -> None:
        """git's failure stops the run before the release tool."""
        tools.fail("git", "commit")

        with patch("changelog_release.process.subprocess.run", side_effect=tools):
            with pytest.raises(SystemExit) as exc_info:
                main(["--repo-path", str(repo_dir)])

        assert exc_info.value.code == 1
        assert not any(cmd[0] == "cargo" for cmd in tools.commands)
        assert "## [v1.2.0]" in (repo_dir / "CHANGELOG.md").read_text(encoding="utf-8")

    def test_dry_run_changes_nothing(self, tools: FakeTools, repo_dir: Path) -> None:
        """Dry-run leaves the repository untouched."""
        with patch("changelog_release.process.subprocess.run", side_effect=tools):
            main(["--repo-path", str(repo_dir), "--dry-run"])

        assert tools.commands == [["convco", "version", "--bump"], ["convco", "changelog"]]
        assert not (repo_dir / "CHANGELOG.md").exists()

    def test_github_outputs(
        self,
        tools: FakeTools,
        repo_dir: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Outputs are written for workflow consumers."""
        output_file = tmp_path / "github_output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))

        with patch("changelog_release.process.subprocess.run", side_effect=tools):
            main(["--repo-path", str(repo_dir)])

        assert output_file.read_text() == "version=1.2.0\ntag=v1.2.0\nreleased=true\n"

    def test_github_release(self, tools: FakeTools, repo_dir: Path) -> None:
        """With --github-release the tag is checked and a release is created."""
        with (
            patch("changelog_release.process.subprocess.run", side_effect=tools),
            patch("changelog_release.github_api.Github") as mock_github,
        ):
            mock_repo = mock_github.return_value.get_repo.return_value
            mock_repo.get_git_ref.side_effect = _not_found
            mock_repo.create_git_release.return_value = MagicMock(html_url="https://example.com/r/v1.2.0")

            main(
                [
                    "--repo-path",
                    str(repo_dir),
                    "--github-release",
                    "--token",
                    "test-token",
                    "--repository",
                    "owner/repo",
                ]
            )

        mock_repo.get_git_ref.assert_called_once_with("tags/v1.2.0")
        mock_repo.create_git_release.assert_called_once_with(
            tag="v1.2.0",
            name="v1.2.0",
            message="### Features\n\n- add release automation",
            prerelease=False,
        )


def _not_found(ref: str) -> None:
    raise GithubException(404, "Not Found", None)
