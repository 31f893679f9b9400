# Copyright (c) 2026 Mark Ferrell. MIT License.
"""GitHub API wrapper for release publication.

References:
    - GitHub REST API: https://docs.github.com/en/rest
    - PyGithub Documentation: https://pygithub.readthedocs.io/
"""

from __future__ import annotations

import os

from github import Github
from github.GithubException import GithubException


class GitHubAPI:
    """Wrapper around PyGithub for tag lookups and release creation.

    Handles authentication via token input, defaulting to GITHUB_TOKEN
    environment variable if not provided.

    References:
        - Authentication: https://docs.github.com/en/rest/authentication
    """

    def __init__(self, token: str | None = None, repository: str | None = None) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token for authentication. Defaults to GITHUB_TOKEN env var.
            repository: Repository in 'owner/repo' format. Defaults to GITHUB_REPOSITORY env var.

        Raises:
            ValueError: If no token or repository is available.
            GithubException: If the token is rejected or the repository cannot be read.

        References:
            - Get a repository: https://docs.github.com/en/rest/repos/repos#get-a-repository
        """
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        self._repository = repository or os.environ.get("GITHUB_REPOSITORY", "")

        if not self._token:
            raise ValueError("GitHub token is required. Set GITHUB_TOKEN or pass token parameter.")
        if not self._repository:
            raise ValueError("Repository is required. Set GITHUB_REPOSITORY or pass repository parameter.")

        self._github = Github(self._token)
        self._repo = self._github.get_repo(self._repository)

    def tag_exists(self, tag_name: str) -> bool:
        """Check if a tag exists in the repository.

        Args:
            tag_name: Name of the tag to check.

        Returns:
            True if the tag exists, False otherwise.

        References:
            - Get a reference: https://docs.github.com/en/rest/git/refs#get-a-reference
        """
        try:
            self._repo.get_git_ref(f"tags/{tag_name}")
            return True
        except GithubException:
            return False

    def create_release(
        self,
        tag_name: str,
        name: str = "",
        body: str = "",
        prerelease: bool = False,
    ) -> str:
        """Create a GitHub release for an existing tag.

        Args:
            tag_name: Tag the release is attached to (e.g., 'v1.2.0').
            name: Release title. Defaults to the tag name.
            body: Release notes in Markdown.
            prerelease: Mark the release as a pre-release.

        Returns:
            The HTML URL of the created release.

        Raises:
            GithubException: If release creation fails.

        References:
            - Create a release: https://docs.github.com/en/rest/releases/releases#create-a-release
        """
        release = self._repo.create_git_release(
            tag=tag_name,
            name=name or tag_name,
            message=body,
            prerelease=prerelease,
        )
        return release.html_url
