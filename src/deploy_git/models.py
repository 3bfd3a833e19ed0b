"""
Data models for the distribution release tool.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class SourceFile:
    """A file handed to the tool, with the working directory it was declared from."""

    path: Path
    cwd: Path

    @property
    def relative_path(self) -> str:
        """Path relative to the declaring working directory, normalized."""
        return os.path.normpath(os.path.relpath(self.path, self.cwd))


@dataclass(frozen=True)
class ReleaseFile:
    """A collected file and where it lands inside the distribution clone."""

    source: Path
    destination: Path


@dataclass(frozen=True)
class NpmOptions:
    """Registry publish configuration."""

    registry: str = ""
    publish: bool = False


@dataclass(frozen=True)
class RunOptions:
    """Configuration for a single release run."""

    repository: str = ""
    prefix: str = ""
    release: bool = False
    bump_version: Optional[bool] = None
    additional_package_files: Tuple[str, ...] = ()
    npm: NpmOptions = field(default_factory=NpmOptions)
    debug: bool = False
    branch: str = "master"
    remote: str = "origin"

    @property
    def effective_bump_version(self) -> bool:
        """Whether the source version is bumped; follows ``release`` when unset."""
        if self.bump_version is None:
            return self.release
        return self.bump_version

    @property
    def normalized_prefix(self) -> str:
        """The prefix with forward slashes turned into the platform separator."""
        return self.prefix.replace("/", os.sep)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a child-process invocation."""

    args: Tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        return " ".join(self.args)


class ReleaseState(Enum):
    """Pipeline states, in execution order."""

    RESOLVING_VERSION = "resolving_version"
    CLONING = "cloning"
    CLEANING = "cleaning"
    COPYING = "copying"
    WRITING_DIST_VERSION = "writing_dist_version"
    STAGING = "staging"
    COMMITTING = "committing"
    TAGGING = "tagging"
    PUSHING = "pushing"
    REMOVING_CLONE = "removing_clone"
    TAGGING_SOURCE = "tagging_source"
    BUMPING_VERSION = "bumping_version"
    ADDING_BUMPED_FILES = "adding_bumped_files"
    COMMITTING_BUMP = "committing_bump"
    PUSHING_BUMP = "pushing_bump"
    PUBLISHING_PACKAGE = "publishing_package"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ReleaseOutcome:
    """Result of a release run: the reached state and either a version or an error."""

    state: ReleaseState
    version: Optional[str] = None
    completed: List[ReleaseState] = field(default_factory=list)
    error: Optional[DeployError] = None
    failed_state: Optional[ReleaseState] = None

    @property
    def succeeded(self) -> bool:
        return self.state is ReleaseState.DONE

    @property
    def soft_failure(self) -> bool:
        return self.error is not None and self.error.soft

    @property
    def hard_failure(self) -> bool:
        return self.error is not None and not self.error.soft


@dataclass
class ReleasePlan:
    """What a release run would do, computed without touching any repository."""

    version: str
    clone_path: Path
    files: Tuple[ReleaseFile, ...]
    stages: List[ReleaseState] = field(default_factory=list)


class DeployError(Exception):
    """Base exception for release operations."""

    soft = False


class NoVersionError(DeployError):
    """No bower.json or package.json to read the version from."""

    soft = True

    def __init__(self, message: str = "Could not find bower.json or package.json file to read version") -> None:
        super().__init__(message)


class NoChangesError(DeployError):
    """Nothing changed since the previous release."""

    soft = True

    def __init__(self, message: str = "No changes to the previous version") -> None:
        super().__init__(message)


class ConfigError(DeployError):
    """Invalid or unreadable run configuration."""

    pass


class CommandError(DeployError):
    """A child process exited with a nonzero code."""

    def __init__(self, command: str, exit_code: int, stderr: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"{command} exited with code {exit_code} [stderr]: {stderr}")


class SourceControlError(CommandError):
    """A git command failed."""

    pass


class CloneError(SourceControlError):
    """Cloning the distribution repository failed."""

    pass


class PublishError(SourceControlError):
    """Staging, committing, tagging or pushing failed."""

    pass


class PublishRegistryError(CommandError):
    """Publishing to the package registry failed."""

    pass


class FilesystemError(DeployError):
    """A file system operation failed."""

    pass


class CleanError(FilesystemError):
    """Clearing the distribution clone failed."""

    pass


class CopyError(FilesystemError):
    """Copying release files into the clone failed."""

    pass
