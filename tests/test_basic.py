"""
Basic tests for the distribution release tool.
"""

import re

from deploy_git import __version__
from deploy_git import (
    ReleaseOrchestrator, RunOptions, SourceFile, ReleaseFile, ReleaseState, ReleaseOutcome,
    GitManager, VersionResolver, RepositoryMaterializer, DistributionPublisher,
    SourceVersionBumper, PackagePublisher,
)


def test_version_format():
    assert isinstance(__version__, str)
    assert __version__ != ""


def test_version_matches_semver():
    assert re.match(r"^\d+\.\d+\.\d+$", __version__)


def test_package_structure():
    """Test package structure and __all__ exports."""
    import deploy_git

    expected_exports = [
        "ReleaseOrchestrator",
        "RunOptions",
        "SourceFile",
        "ReleaseFile",
        "ReleaseState",
        "ReleaseOutcome",
        "GitManager",
        "VersionResolver",
        "RepositoryMaterializer",
        "DistributionPublisher",
        "SourceVersionBumper",
        "PackagePublisher",
    ]

    for export in expected_exports:
        assert hasattr(deploy_git, export), f"Missing export: {export}"
        assert export in deploy_git.__all__
