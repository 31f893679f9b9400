# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Main entry point for the changelog release tool.

This module parses configuration, runs the release pipeline and maps its
failures to process exit codes.

References:
    - GitHub Actions Outputs:
      https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/passing-information-between-jobs#setting-an-output-parameter
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from github.GithubException import GithubException

from changelog_release.changelog import DEFAULT_CHANGELOG_COMMAND, DEFAULT_MARKER
from changelog_release.errors import CommandError, ReleaseError
from changelog_release.github_api import GitHubAPI
from changelog_release.pipeline import ReleaseInputs, ReleaseOutputs, run_pipeline
from changelog_release.process import CommandRunner, split_command
from changelog_release.release import DEFAULT_NO_CONFIRM_FLAG, DEFAULT_RELEASE_COMMAND
from changelog_release.version import DEFAULT_VERSION_COMMAND, validate_prefix

logger = logging.getLogger(__name__)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "false").lower() == "true"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="changelog-release",
        description="Compute the next version, update CHANGELOG.md, commit it and run the release tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (used as defaults when CLI args not provided):
  INPUT_REPO_PATH              Repository root
  INPUT_CHANGELOG              Changelog file, relative to the repository root
  INPUT_TAG_PREFIX             Prefix for release tags
  INPUT_VERSION_COMMAND        Command printing the next version
  INPUT_CHANGELOG_COMMAND      Command printing the full changelog
  INPUT_RELEASE_COMMAND        Release tool command
  INPUT_NO_CONFIRM_FLAG        Release tool flag suppressing its prompt
  INPUT_TOKEN, GITHUB_TOKEN    GitHub token for --github-release
  INPUT_REPOSITORY, GITHUB_REPOSITORY
                               Repository in owner/repo format
  INPUT_DRY_RUN, INPUT_DEBUG, INPUT_PAUSE, INPUT_STRICT_MARKER,
  INPUT_GITHUB_RELEASE         Boolean switches (true/false)

Examples:
  # Release the current repository
  changelog-release

  # Preview without writing, committing or releasing
  changelog-release --dry-run --debug

  # Release tool without a no-confirm flag: answer its prompt with 'y'
  changelog-release --release-command "my-release" --no-confirm-flag ""
        """,
    )

    parser.add_argument(
        "--repo-path",
        default=os.environ.get("INPUT_REPO_PATH", "."),
        help="Repository root; all commands run here (default: .)",
    )
    parser.add_argument(
        "--changelog",
        default=os.environ.get("INPUT_CHANGELOG", "CHANGELOG.md"),
        help="Changelog file, relative to the repository root (default: CHANGELOG.md)",
    )
    parser.add_argument(
        "--marker",
        default=os.environ.get("INPUT_MARKER", DEFAULT_MARKER),
        help=f"Placeholder rewritten to the release tag (default: {DEFAULT_MARKER})",
    )
    parser.add_argument(
        "--strict-marker",
        action="store_true",
        default=_env_flag("INPUT_STRICT_MARKER"),
        help="Fail when the changelog does not contain the marker",
    )
    parser.add_argument(
        "--tag-prefix",
        default=os.environ.get("INPUT_TAG_PREFIX", "v"),
        help="Prefix for release tags (default: v)",
    )
    parser.add_argument(
        "--version-command",
        default=os.environ.get("INPUT_VERSION_COMMAND", DEFAULT_VERSION_COMMAND),
        help=f"Command printing the next version (default: {DEFAULT_VERSION_COMMAND})",
    )
    parser.add_argument(
        "--changelog-command",
        default=os.environ.get("INPUT_CHANGELOG_COMMAND", DEFAULT_CHANGELOG_COMMAND),
        help=f"Command printing the full changelog (default: {DEFAULT_CHANGELOG_COMMAND})",
    )
    parser.add_argument(
        "--release-command",
        default=os.environ.get("INPUT_RELEASE_COMMAND", DEFAULT_RELEASE_COMMAND),
        help=f"Release tool command (default: {DEFAULT_RELEASE_COMMAND})",
    )
    parser.add_argument(
        "--no-confirm-flag",
        default=os.environ.get("INPUT_NO_CONFIRM_FLAG", DEFAULT_NO_CONFIRM_FLAG),
        help=f"Release tool flag suppressing its prompt; empty feeds 'y' instead (default: {DEFAULT_NO_CONFIRM_FLAG})",
    )
    parser.add_argument(
        "--github-release",
        action="store_true",
        default=_env_flag("INPUT_GITHUB_RELEASE"),
        help="Check the tag on GitHub first and create a GitHub release afterwards",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("INPUT_TOKEN", os.environ.get("GITHUB_TOKEN", "")),
        help="GitHub token (default: from INPUT_TOKEN or GITHUB_TOKEN env)",
    )
    parser.add_argument(
        "--repository",
        default=os.environ.get("INPUT_REPOSITORY", os.environ.get("GITHUB_REPOSITORY", "")),
        help="GitHub repository in owner/repo format (default: from INPUT_REPOSITORY or GITHUB_REPOSITORY env)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=_env_flag("INPUT_DRY_RUN"),
        help="Dry-run mode - don't write, commit or release",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env_flag("INPUT_DEBUG"),
        help="Enable debug logging",
    )
    parser.add_argument(
        "--pause",
        action="store_true",
        default=_env_flag("INPUT_PAUSE"),
        help="Wait for Enter before exiting, whatever the outcome",
    )

    return parser


def validate_inputs(parsed: argparse.Namespace) -> ReleaseInputs:
    """Validate parsed arguments and build the release inputs.

    Exits with status 1 on the first invalid value.
    """
    if not validate_prefix(parsed.tag_prefix):
        logger.error(
            "Invalid tag-prefix '%s': must be non-empty and not contain "
            "invalid git ref characters (.. ~ ^ : \\ space tab newline * ? [)",
            parsed.tag_prefix,
        )
        sys.exit(1)

    if not parsed.marker:
        logger.error("Invalid marker: must be non-empty")
        sys.exit(1)

    for option in ("version_command", "changelog_command", "release_command"):
        try:
            split_command(getattr(parsed, option))
        except ValueError as e:
            logger.error("Invalid %s '%s': %s", option.replace("_", "-"), getattr(parsed, option), e)
            sys.exit(1)

    repo_path = Path(parsed.repo_path)
    if not repo_path.is_dir():
        logger.error("Repository path '%s' is not a directory", repo_path)
        sys.exit(1)

    return ReleaseInputs(
        repo_path=repo_path,
        changelog=Path(parsed.changelog),
        debug=parsed.debug,
        dry_run=parsed.dry_run,
        pause=parsed.pause,
        marker=parsed.marker,
        strict_marker=parsed.strict_marker,
        tag_prefix=parsed.tag_prefix,
        version_command=parsed.version_command,
        changelog_command=parsed.changelog_command,
        release_command=parsed.release_command,
        no_confirm_flag=parsed.no_confirm_flag,
        github_release=parsed.github_release,
        token=parsed.token,
        repository=parsed.repository,
    )


def parse_inputs(args: list[str] | None = None) -> ReleaseInputs:
    """Parse release configuration from CLI arguments and environment variables.

    CLI arguments take precedence over environment variables.

    Args:
        args: List of CLI arguments. If None, only environment variables
              and defaults are used.

    Returns:
        ReleaseInputs with parsed values.
    """
    return validate_inputs(_build_parser().parse_args(args if args is not None else []))


def configure_logging(debug: bool) -> None:
    """Configure logging based on debug flag.

    Args:
        debug: If True, enable DEBUG level logging.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def set_outputs(outputs: ReleaseOutputs) -> None:
    """Append release outputs to the GITHUB_OUTPUT file when running in Actions.

    Args:
        outputs: ReleaseOutputs to write.
    """
    output_file = os.environ.get("GITHUB_OUTPUT", "")
    if not output_file:
        logger.debug("GITHUB_OUTPUT not set, outputs will not be written")
        return

    with open(output_file, "a") as f:
        f.write(f"version={outputs.version}\n")
        f.write(f"tag={outputs.tag}\n")
        f.write(f"released={str(outputs.released).lower()}\n")

    logger.info("Set outputs: version=%s, tag=%s", outputs.version, outputs.tag)


def wait_for_operator() -> None:
    """Block until the operator presses Enter."""
    try:
        input("Press Enter to exit...")
    except EOFError:
        logger.debug("No terminal input available, not pausing")


def run(inputs: ReleaseInputs) -> int:
    """Run the release and return the process exit code.

    A failing external tool's exit code is passed through; every other
    failure maps to 1.
    """
    api: GitHubAPI | None = None
    if inputs.github_release:
        try:
            api = GitHubAPI(token=inputs.token, repository=inputs.repository)
        except (ValueError, GithubException) as e:
            logger.error("Failed to initialize GitHub API: %s", e)
            return 1

    runner = CommandRunner(inputs.repo_path)

    try:
        outputs = run_pipeline(runner, inputs, api)
    except CommandError as e:
        logger.error("Release aborted: %s", e)
        return e.returncode if e.returncode > 0 else 1
    except ReleaseError as e:
        logger.error("Release aborted: %s", e)
        return 1
    except GithubException as e:
        logger.error("GitHub request failed: %s", e)
        return 1
    except OSError as e:
        logger.error("Release aborted: %s", e)
        return 1

    set_outputs(outputs)
    if inputs.dry_run:
        logger.info("[DRY-RUN] Release %s not performed", outputs.tag)
    else:
        logger.info("Release %s complete", outputs.tag)
    return 0


def main(args: list[str] | None = None) -> None:
    """Main entry point for the console script."""
    parsed = _build_parser().parse_args(sys.argv[1:] if args is None else args)
    configure_logging(parsed.debug)

    exit_code = 1
    try:
        exit_code = run(validate_inputs(parsed))
    finally:
        if parsed.pause:
            wait_for_operator()

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
