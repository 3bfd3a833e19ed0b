"""
Materialization of release files into a fresh clone of the distribution repository.
"""

from __future__ import annotations

import logging
import os
import random
import shutil
import time
from pathlib import Path
from typing import Iterable, Optional, Tuple

from .git_manager import GitManager
from .metadata import (
    BOWER_JSON,
    PACKAGE_JSON,
    VERSION_JSON,
    VERSION_SNAPSHOT,
    set_version,
    write_json,
)
from .models import CleanError, CopyError, ReleaseFile, RunOptions, SourceFile


logger = logging.getLogger(__name__)

CONTROL_DIR = ".git"
CLONE_PREFIX = "deploy"


def make_clone_path(base_dir: Path) -> Path:
    """Return a fresh clone location: ``deploy-<millis>-<random>`` under ``base_dir``."""
    millis = int(time.time() * 1000)
    return Path(os.path.normpath(Path(base_dir) / f"{CLONE_PREFIX}-{millis}-{random.randrange(1000)}"))


def destination_for(source: SourceFile, clone_path: Path, prefix: str = "") -> Path:
    """Map an input file to its location inside the clone, stripping ``prefix``.

    Raises CopyError for files that do not live under their declared cwd.
    """
    try:
        rel = source.relative_path
    except ValueError as e:
        raise CopyError(f"{source.path} is not under {source.cwd}: {e}") from e
    if os.path.isabs(rel) or rel == os.pardir or rel.startswith(os.pardir + os.sep):
        raise CopyError(f"{source.path} is outside its working directory {source.cwd}")
    prefix = prefix.replace("/", os.sep)
    prefix = prefix.rstrip(os.sep)
    if prefix and (rel == prefix or rel.startswith(prefix + os.sep)):
        rel = rel[len(prefix) + 1 :]
    return Path(clone_path) / rel


def collect_release_files(
    sources: Iterable[SourceFile], clone_path: Path, prefix: str = ""
) -> Tuple[ReleaseFile, ...]:
    """Consume the input stream into an immutable list of release files."""
    files = tuple(
        ReleaseFile(source=Path(s.path), destination=destination_for(s, clone_path, prefix))
        for s in sources
    )
    logger.debug(f"Collected {len(files)} release files")
    return files


class RepositoryMaterializer:
    """Clones, clears and fills the distribution working clone."""

    def __init__(
        self,
        source_dir: Path,
        clone_path: Path,
        options: RunOptions,
        git_manager: Optional[GitManager] = None,
    ) -> None:
        self.source_dir = Path(source_dir).resolve()
        self.clone_path = Path(clone_path)
        self.options = options
        self.git_manager = git_manager or GitManager(self.source_dir, debug=options.debug)

    def clone(self, version: str) -> str:
        """Clone the configured branch of the distribution repository."""
        logger.info(f"Cloning distribution repository {self.options.repository}")
        self.git_manager.clone(self.options.repository, self.clone_path, self.options.branch)
        return version

    def clean(self, version: str) -> str:
        """Delete every file in the clone outside the .git directory, keeping directories."""
        logger.info("Cleaning deployment repository folder")
        try:
            self._clean_folder(self.clone_path)
        except OSError as e:
            logger.error(f"Failed to clean {self.clone_path}: {e}")
            raise CleanError(f"Failed to clean {self.clone_path}: {e}") from e
        return version

    def _clean_folder(self, folder: Path) -> None:
        for entry in folder.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                if entry.name != CONTROL_DIR:
                    self._clean_folder(entry)
                continue
            entry.unlink()

    def copy(self, version: str, files: Iterable[ReleaseFile]) -> str:
        """Copy every collected non-directory file to its destination, byte for byte."""
        logger.info("Copying distribution files to deployment folder")
        try:
            for release_file in files:
                if release_file.source.is_dir():
                    continue
                release_file.destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(release_file.source, release_file.destination)
        except OSError as e:
            logger.error(f"Failed to copy release files: {e}")
            raise CopyError(f"Failed to copy release files: {e}") from e
        return version

    def write_versions(self, version: str) -> str:
        """Set ``version`` in the clone's metadata and snapshot it to .version.json."""
        logger.info("Updating version in distribution files (bower.json and package.json)")
        bower = self.clone_path / BOWER_JSON
        package = self.clone_path / PACKAGE_JSON

        if bower.exists():
            set_version(bower, version)
        if package.exists():
            set_version(package, version)
        if not bower.exists() and not package.exists():
            write_json(self.clone_path / VERSION_JSON, {"version": version})

        write_json(self.source_dir / VERSION_SNAPSHOT, {"version": version})
        return version

    def discard_clone(self) -> None:
        """Remove a leftover clone after a failed run, logging instead of raising."""
        if not self.clone_path.exists():
            return

        logger.info(f"Discarding distribution clone {self.clone_path}")
        try:
            shutil.rmtree(self.clone_path)
        except OSError as e:
            logger.warning(f"Could not discard clone {self.clone_path}: {e}")
