"""
Deploy Git - promote build artifacts into a distribution Git repository.

This package clones a distribution repository, replaces its contents with the
files of a build, commits, tags and pushes them, and optionally bumps the
source project's version and publishes the package to npm.
"""

__version__ = "0.1.0"

from .release_orchestrator import ReleaseOrchestrator
from .models import (
    DeployError,
    ReleaseFile,
    ReleaseOutcome,
    ReleaseState,
    RunOptions,
    NpmOptions,
    SourceFile,
)
from .git_manager import GitManager
from .version_resolver import VersionResolver
from .materializer import RepositoryMaterializer
from .publisher import DistributionPublisher
from .version_bumper import SourceVersionBumper
from .package_publisher import PackagePublisher

__all__ = [
    "ReleaseOrchestrator",
    "DeployError",
    "ReleaseFile",
    "ReleaseOutcome",
    "ReleaseState",
    "RunOptions",
    "NpmOptions",
    "SourceFile",
    "GitManager",
    "VersionResolver",
    "RepositoryMaterializer",
    "DistributionPublisher",
    "SourceVersionBumper",
    "PackagePublisher",
]
