"""
Publishing the released package to an npm registry.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .command_runner import CommandRunner
from .models import PublishRegistryError, RunOptions


logger = logging.getLogger(__name__)

NPM_EXECUTABLE = "npm"


class PackagePublisher:
    """Runs ``npm publish`` against the prefix directory of a release."""

    def __init__(
        self, source_dir: Path, options: RunOptions, runner: Optional[CommandRunner] = None
    ) -> None:
        self.source_dir = Path(source_dir).resolve()
        self.options = options
        self.runner = runner or CommandRunner(self.source_dir, debug=options.debug)

    @property
    def enabled(self) -> bool:
        return self.options.release and self.options.npm.publish

    def command(self) -> List[str]:
        args = [NPM_EXECUTABLE, "publish"]
        if self.options.npm.registry:
            args.extend(["--registry", self.options.npm.registry])
        args.append(self.options.normalized_prefix or ".")
        return args

    def publish(self, version: str) -> str:
        if not self.enabled:
            return version
        registry = self.options.npm.registry or "default registry"
        logger.info(f"Publishing {self.options.prefix} to {registry}")
        result = self.runner.run(self.command())
        if not result.ok:
            logger.error(f"npm publish failed with code {result.exit_code}: {result.stderr.strip()}")
            raise PublishRegistryError("npm publish", result.exit_code, result.stderr)
        logger.info(f"Published {self.options.prefix} to {registry}")
        return version
