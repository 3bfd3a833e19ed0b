"""
Committing, tagging and pushing the materialized distribution clone.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from .git_manager import GitManager
from .models import CleanError, RunOptions


logger = logging.getLogger(__name__)


def release_label(release: bool) -> str:
    """Commit and tag wording for a release or pre-release run."""
    return "Release" if release else "Pre-release"


class DistributionPublisher:
    """Publishes the clone to its remote; every git call runs inside the clone."""

    def __init__(
        self, clone_path: Path, options: RunOptions, git_manager: Optional[GitManager] = None
    ) -> None:
        self.clone_path = Path(clone_path)
        self.options = options
        self.git_manager = git_manager or GitManager(self.clone_path, debug=options.debug)

    def stage(self, version: str) -> str:
        logger.info("Adding files to distribution repository")
        self.git_manager.add_all()
        return version

    def commit(self, version: str) -> str:
        logger.info("Committing files to distribution repository")
        self.git_manager.commit(f"{release_label(self.options.release)} {version}")
        return version

    def tag(self, version: str) -> str:
        logger.info("Tagging files to distribution repository")
        self.git_manager.tag(f"v{version}", release_label(self.options.release))
        return version

    def push(self, version: str) -> str:
        logger.info("Pushing files to distribution repository")
        self.git_manager.push(self.options.remote, self.options.branch)
        return version

    def remove_clone(self, version: str) -> str:
        """Delete the working clone once it has been pushed."""
        logger.info("Removing local distribution repository clone")
        try:
            shutil.rmtree(self.clone_path)
        except OSError as e:
            logger.error(f"Failed to remove {self.clone_path}: {e}")
            raise CleanError(f"Failed to remove {self.clone_path}: {e}") from e
        return version
