"""
Child-process execution for non-git collaborators (the package registry client).
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .models import CommandResult


logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs an executable synchronously and captures its output."""

    def __init__(self, cwd: Optional[Path] = None, debug: bool = False) -> None:
        self.cwd = (cwd or Path.cwd()).resolve()
        self.debug = debug

    def run(self, args: Sequence[str]) -> CommandResult:
        """Run ``args`` to completion; a missing executable maps to exit code 127."""
        command = tuple(str(a) for a in args)
        if self.debug:
            logger.info(f"Processing command: {' '.join(command)}")
        else:
            logger.debug(f"Running '{' '.join(command)}' in {self.cwd}")

        try:
            completed = subprocess.run(
                command,
                cwd=str(self.cwd),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            logger.error(f"Executable not found: {command[0]}")
            return CommandResult(args=command, exit_code=127, stderr=str(e))

        if completed.stdout and self.debug:
            logger.info(completed.stdout.rstrip())
        return CommandResult(
            args=command,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
