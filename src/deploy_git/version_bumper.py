"""
Tagging the source repository and bumping its own version after a release.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .git_manager import GitManager
from .metadata import PRIMARY_METADATA_FILES, set_version
from .models import RunOptions
from .version_resolver import next_patch_version


logger = logging.getLogger(__name__)

BUMP_COMMIT_MESSAGE = "[gulp] Bumping version"


class SourceVersionBumper:
    """Operates on the source working directory, never on the distribution clone."""

    def __init__(
        self, source_dir: Path, options: RunOptions, git_manager: Optional[GitManager] = None
    ) -> None:
        self.source_dir = Path(source_dir).resolve()
        self.options = options
        self.git_manager = git_manager or GitManager(self.source_dir, debug=options.debug)

    @property
    def enabled(self) -> bool:
        return self.options.effective_bump_version

    def tag_source(self, version: str) -> str:
        """Tag the current source commit as ``v<version>`` on release runs only."""
        if not self.options.release:
            logger.info("Not tagging source files - not a release")
            return version
        logger.info("Tagging source files")
        self.git_manager.tag(f"v{version}", "Release")
        return version

    def version_files(self) -> List[str]:
        """Metadata files carrying the source version, relative to the source dir."""
        files = [name for name in PRIMARY_METADATA_FILES if (self.source_dir / name).exists()]
        files.extend(
            name for name in self.options.additional_package_files if (self.source_dir / name).exists()
        )
        return files

    def bump(self, version: str) -> str:
        """Write the next patch version into the source metadata files."""
        if not self.enabled:
            return version
        next_release = next_patch_version(version)
        logger.info(f'Bumping version to "{next_release}"')
        for name in PRIMARY_METADATA_FILES:
            path = self.source_dir / name
            if path.exists():
                set_version(path, next_release)
        for name in self.options.additional_package_files:
            path = self.source_dir / name
            if path.exists():
                set_version(path, next_release)
            else:
                logger.warning(f"Additional package file {name} not found; skipping")
        return version

    def add_files(self, version: str) -> str:
        if not self.enabled:
            return version
        logger.info("Adding versioned files to repository")
        self.git_manager.add_paths(self.version_files())
        return version

    def commit(self, version: str) -> str:
        if not self.enabled:
            return version
        logger.info("Committing files to repository")
        self.git_manager.commit(BUMP_COMMIT_MESSAGE)
        return version

    def push(self, version: str) -> str:
        if not self.enabled:
            return version
        logger.info("Pushing files to repository")
        self.git_manager.push(self.options.remote, self.options.branch, force=True)
        return version
