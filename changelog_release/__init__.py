# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Changelog release - version, changelog, commit and release in one step."""

from changelog_release.pipeline import ReleaseInputs, ReleaseOutputs, run_pipeline
from changelog_release.process import CommandRunner
from changelog_release.version import Version, parse_version

__all__ = ["CommandRunner", "ReleaseInputs", "ReleaseOutputs", "Version", "parse_version", "run_pipeline"]
