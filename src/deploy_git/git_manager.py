"""
Git command execution for the source and distribution repositories.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Type

from git import Git
from git.exc import GitCommandNotFound

from .models import CloneError, CommandResult, NoChangesError, PublishError, SourceControlError


logger = logging.getLogger(__name__)

NOTHING_TO_COMMIT_MARKERS = ("nothing to commit", "nothing added to commit")


class GitManager:
    """Runs git commands in one working directory and reports (exit code, stdout, stderr)."""

    def __init__(self, repo_path: Optional[Path] = None, debug: bool = False) -> None:
        """Initialize Git manager with optional working directory."""
        self.repo_path = (repo_path or Path.cwd()).resolve()
        self.debug = debug
        self._git: Optional[Git] = None

    @property
    def git(self) -> Git:
        """Get the GitPython command wrapper bound to the working directory."""
        if self._git is None:
            self._git = Git(str(self.repo_path))
        return self._git

    def run(self, *args: str) -> CommandResult:
        """Run ``git <args>`` to completion without raising on nonzero exit."""
        command = ["git", *args]
        if self.debug:
            logger.info(f"Processing git command: {' '.join(command)}")
        else:
            logger.debug(f"Running '{' '.join(command)}' in {self.repo_path}")

        try:
            status, stdout, stderr = self.git.execute(
                command, with_extended_output=True, with_exceptions=False
            )
        except GitCommandNotFound as e:
            logger.error(f"git executable not available: {e}")
            return CommandResult(args=tuple(command), exit_code=127, stderr=str(e))

        if stdout and self.debug:
            logger.info(stdout)
        return CommandResult(args=tuple(command), exit_code=status, stdout=stdout or "", stderr=stderr or "")

    def check(
        self, result: CommandResult, error_cls: Type[SourceControlError] = SourceControlError
    ) -> CommandResult:
        """Raise ``error_cls`` carrying stderr and exit code if ``result`` failed."""
        if not result.ok:
            sub = result.args[1] if len(result.args) > 1 else ""
            logger.error(f"git {sub} failed with code {result.exit_code}: {result.stderr.strip()}")
            raise error_cls(f"git {sub}", result.exit_code, result.stderr)
        return result

    # --- Distribution repository operations ---
    def clone(self, url: str, destination: Path, branch: str = "master") -> CommandResult:
        """Single-branch clone of ``branch`` into ``destination``."""
        result = self.run("clone", "-b", branch, "--single-branch", url, str(destination))
        return self.check(result, CloneError)

    def add_all(self) -> CommandResult:
        """Stage every change in the working tree, deletions included."""
        return self.check(self.run("add", "--all", "."), PublishError)

    def add_paths(self, paths: Iterable[str]) -> CommandResult:
        """Stage the given paths."""
        return self.check(self.run("add", *paths), PublishError)

    def commit(self, message: str) -> CommandResult:
        """Commit the index; an empty commit raises NoChangesError."""
        result = self.run("commit", "-m", message)
        if not result.ok:
            output = f"{result.stdout}\n{result.stderr}".lower()
            if any(marker in output for marker in NOTHING_TO_COMMIT_MARKERS):
                logger.warning(f"Nothing to commit in {self.repo_path}")
                raise NoChangesError()
        return self.check(result, PublishError)

    def tag(self, name: str, message: str) -> CommandResult:
        """Force-create an annotated tag on HEAD."""
        return self.check(self.run("tag", "-f", name, "-m", message), PublishError)

    def push(self, remote: str = "origin", branch: str = "master", force: bool = False) -> CommandResult:
        """Push ``branch`` together with tags."""
        args = ["push", "--tags"]
        if force:
            args.append("--force")
        args.extend([remote, branch])
        return self.check(self.run(*args), PublishError)

    # --- Source repository queries ---
    def short_head(self) -> str:
        """Return the abbreviated hash of HEAD."""
        result = self.check(self.run("rev-parse", "--short", "HEAD"))
        return result.stdout.strip()
