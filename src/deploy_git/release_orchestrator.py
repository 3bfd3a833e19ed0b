"""
Release orchestration: the ordered pipeline from version resolution to package publish.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from .command_runner import CommandRunner
from .git_manager import GitManager
from .materializer import RepositoryMaterializer, collect_release_files, make_clone_path
from .models import (
    ConfigError,
    DeployError,
    ReleaseFile,
    ReleaseOutcome,
    ReleasePlan,
    ReleaseState,
    RunOptions,
    SourceFile,
)
from .package_publisher import PackagePublisher
from .publisher import DistributionPublisher
from .version_bumper import SourceVersionBumper
from .version_resolver import VersionResolver


logger = logging.getLogger(__name__)

Step = Callable[[Optional[str]], str]

BUMP_STATES = (
    ReleaseState.BUMPING_VERSION,
    ReleaseState.ADDING_BUMPED_FILES,
    ReleaseState.COMMITTING_BUMP,
    ReleaseState.PUSHING_BUMP,
)


class ReleaseOrchestrator:
    """Runs a release as a strictly sequential list of fallible steps.

    Every step takes the resolved version and returns it unchanged; the first
    DeployError halts the pipeline and becomes the outcome's error. There is
    no retry and no rollback.
    """

    def __init__(
        self,
        options: RunOptions,
        source_dir: Optional[Path] = None,
        work_dir: Optional[Path] = None,
        clone_path: Optional[Path] = None,
    ) -> None:
        """Initialize the orchestrator and its stage components."""
        self.options = options
        self.source_dir = (source_dir or Path.cwd()).resolve()
        self.clone_path = clone_path or make_clone_path(work_dir or self.source_dir)

        source_git = GitManager(self.source_dir, debug=options.debug)
        clone_git = GitManager(self.clone_path, debug=options.debug)

        self.resolver = VersionResolver(self.source_dir, options, source_git)
        self.materializer = RepositoryMaterializer(self.source_dir, self.clone_path, options, source_git)
        self.publisher = DistributionPublisher(self.clone_path, options, clone_git)
        self.bumper = SourceVersionBumper(self.source_dir, options, source_git)
        self.package_publisher = PackagePublisher(
            self.source_dir, options, CommandRunner(self.source_dir, debug=options.debug)
        )
        logger.info(f"Initialized release orchestrator for {self.source_dir} -> {self.clone_path}")

    def collect(self, sources: Iterable[SourceFile]) -> Tuple[ReleaseFile, ...]:
        """Input phase: drain the source stream into release files."""
        return collect_release_files(sources, self.clone_path, self.options.prefix)

    def _steps(self, files: Tuple[ReleaseFile, ...]) -> List[Tuple[ReleaseState, Step]]:
        m, p, b = self.materializer, self.publisher, self.bumper
        return [
            (ReleaseState.RESOLVING_VERSION, lambda _version: self.resolver.resolve()),
            (ReleaseState.CLONING, m.clone),
            (ReleaseState.CLEANING, m.clean),
            (ReleaseState.COPYING, lambda version: m.copy(version, files)),
            (ReleaseState.WRITING_DIST_VERSION, m.write_versions),
            (ReleaseState.STAGING, p.stage),
            (ReleaseState.COMMITTING, p.commit),
            (ReleaseState.TAGGING, p.tag),
            (ReleaseState.PUSHING, p.push),
            (ReleaseState.REMOVING_CLONE, p.remove_clone),
            (ReleaseState.TAGGING_SOURCE, b.tag_source),
            (ReleaseState.BUMPING_VERSION, b.bump),
            (ReleaseState.ADDING_BUMPED_FILES, b.add_files),
            (ReleaseState.COMMITTING_BUMP, b.commit),
            (ReleaseState.PUSHING_BUMP, b.push),
            (ReleaseState.PUBLISHING_PACKAGE, self.package_publisher.publish),
        ]

    def _validate(self) -> None:
        if not self.options.repository:
            raise ConfigError("No distribution repository configured")

    def run(self, sources: Iterable[SourceFile]) -> ReleaseOutcome:
        """
        Execute the whole release for the given input files.

        Returns:
            ReleaseOutcome in state DONE, or FAILED with the halting error.
        """
        outcome = ReleaseOutcome(state=ReleaseState.RESOLVING_VERSION)
        version: Optional[str] = None

        try:
            files = self.collect(sources)
            self._validate()
            for state, step in self._steps(files):
                outcome.state = state
                logger.debug(f"Entering state {state.value}")
                version = step(version)
                outcome.version = version
                outcome.completed.append(state)
            outcome.state = ReleaseState.DONE
            logger.info(f"Release {version} completed")
        except DeployError as e:
            outcome.failed_state = outcome.state
            outcome.state = ReleaseState.FAILED
            outcome.error = e
            self._report(outcome)
        finally:
            if outcome.state is not ReleaseState.DONE:
                self.materializer.discard_clone()

        return outcome

    def _report(self, outcome: ReleaseOutcome) -> None:
        """Soft errors are informational; everything else is a hard failure."""
        stage = outcome.failed_state.value if outcome.failed_state else "unknown"
        if outcome.soft_failure:
            logger.warning(f"{outcome.error}")
        else:
            logger.error(f"Release failed while {stage}: {outcome.error}")

    def plan(self, sources: Iterable[SourceFile]) -> ReleasePlan:
        """Resolve the version and list the stages a run would execute, changing nothing."""
        files = self.collect(sources)
        version = self.resolver.resolve()
        stages = [state for state, _ in self._steps(files) if self._applies(state)]
        return ReleasePlan(version=version, clone_path=self.clone_path, files=files, stages=stages)

    def _applies(self, state: ReleaseState) -> bool:
        if state is ReleaseState.TAGGING_SOURCE:
            return self.options.release
        if state in BUMP_STATES:
            return self.bumper.enabled
        if state is ReleaseState.PUBLISHING_PACKAGE:
            return self.package_publisher.enabled
        return True
