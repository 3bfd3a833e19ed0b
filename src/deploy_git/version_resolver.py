"""
Release version derivation from project metadata and source-control state.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Mapping, Optional

from .git_manager import GitManager
from .metadata import read_base_version
from .models import ConfigError, RunOptions


logger = logging.getLogger(__name__)

BUILD_NUMBER_ENV = "BUILD_NUMBER"
DEFAULT_BUILD_LABEL = "beta"

_SEMVER_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?$")
_BUILD_DECORATION_RE = re.compile(r"^build\.[0-9A-Za-z-]+$")


def pre_release_version(base: str, short_hash: str, build_number: Optional[str] = None) -> str:
    """Decorate ``base`` as ``<base>-build.<n|beta>+sha.<hash>``."""
    label = build_number if build_number else DEFAULT_BUILD_LABEL
    return f"{base}-build.{label}+sha.{short_hash}"


def _parse(version: str):
    match = _SEMVER_RE.match(version.strip())
    if match is None:
        raise ConfigError(f"Invalid semantic version: {version}")
    return match.groups()


def base_version(version: str) -> str:
    """Strip any pre-release/build decoration, returning MAJOR.MINOR.PATCH."""
    major, minor, patch, _pre, _build = _parse(version)
    return f"{int(major)}.{int(minor)}.{int(patch)}"


def is_build_decorated(version: str) -> bool:
    """True for versions produced by pre_release_version()."""
    _major, _minor, _patch, pre, build = _parse(version)
    return bool(pre and _BUILD_DECORATION_RE.match(pre) and build and build.startswith("sha."))


def next_patch_version(version: str) -> str:
    """Return the next patch release of ``version``.

    A plain pre-release such as ``2.0.0-rc.1`` is finalized to ``2.0.0``. A
    build-decorated pre-release run (``1.2.3-build.7+sha.abc1234``) moves on to
    the next patch of its base version.
    """
    major, minor, patch, pre, _build = _parse(version)
    if pre and not is_build_decorated(version):
        return f"{int(major)}.{int(minor)}.{int(patch)}"
    return f"{int(major)}.{int(minor)}.{int(patch) + 1}"


class VersionResolver:
    """Resolves the one version string used by a release run."""

    def __init__(
        self,
        source_dir: Path,
        options: RunOptions,
        git_manager: Optional[GitManager] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.source_dir = Path(source_dir).resolve()
        self.options = options
        self.git_manager = git_manager or GitManager(self.source_dir, debug=options.debug)
        self.environ = os.environ if environ is None else environ

    def resolve(self) -> str:
        """
        Read the base version and, for pre-releases, decorate it with build and commit.

        The commit hash is only looked up for pre-releases so that a release run
        does not depend on the state of the source repository.

        Raises:
            NoVersionError: neither bower.json nor package.json exists.
            SourceControlError: the commit hash could not be determined.
            ConfigError: the version cannot be bumped although a bump is requested.
        """
        version = read_base_version(self.source_dir)
        if self.options.effective_bump_version:
            next_patch_version(version)
        if self.options.release:
            logger.info(f"Release version {version}")
            return version

        logger.info("Fetching SHA hashes")
        short_hash = self.git_manager.short_head()
        resolved = pre_release_version(version, short_hash, self.environ.get(BUILD_NUMBER_ENV))
        logger.info(f"Pre-release version {resolved}")
        return resolved
