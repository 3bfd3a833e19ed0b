"""
Command-line interface for the distribution release tool.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import load_options
from .models import DeployError, ReleaseOutcome, ReleasePlan, SourceFile
from .release_orchestrator import ReleaseOrchestrator
from .version_resolver import VersionResolver
from . import __version__ as PACKAGE_VERSION


console = Console()
logger = logging.getLogger(__name__)

LOG_ENV = "DEPLOY_GIT_LOG"


def _print_version(ctx, param, value):
    """Eager option callback to print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"deploy-git {PACKAGE_VERSION}")
    ctx.exit()


def _default_log_path() -> Path:
    """Determine default log file path (~/.deploy-git/deploy-git.log)."""
    env_path = os.environ.get(LOG_ENV)
    if env_path:
        p = Path(env_path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    base = Path.home() / ".deploy-git"
    base.mkdir(parents=True, exist_ok=True)
    return base / "deploy-git.log"


def setup_logging(verbose: bool = False, console_level: Optional[str] = None, log_file: Optional[Path] = None) -> Path:
    """Setup logging: a per-run file, a rotated aggregate file and an optional rich console.

    Console logging is off unless --verbose or --log-level is given.
    Returns the aggregate log path.
    """
    aggregate_path = Path(log_file) if log_file else _default_log_path()
    base_dir = aggregate_path.parent
    base_stem = aggregate_path.stem or "deploy-git"
    base_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    per_run_path = base_dir / f"{base_stem}-{timestamp}.log"

    root = logging.getLogger()
    # Clear existing handlers to avoid duplication in tests / repeated invocations
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    file_fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    run_file_handler = logging.FileHandler(str(per_run_path), encoding="utf-8")
    run_file_handler.setLevel(logging.DEBUG)
    run_file_handler.setFormatter(file_fmt)
    root.addHandler(run_file_handler)

    aggregate_handler = RotatingFileHandler(
        str(aggregate_path), maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    aggregate_handler.setLevel(logging.DEBUG)
    aggregate_handler.setFormatter(file_fmt)
    root.addHandler(aggregate_handler)

    if verbose or console_level:
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
        }
        ch_level = level_map.get((console_level or "info").lower(), logging.INFO)
        console_handler = RichHandler(console=console, rich_tracebacks=True)
        console_handler.setLevel(ch_level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console_handler)

    # GitPython logs every command at DEBUG; keep our own command log authoritative
    logging.getLogger("git").setLevel(logging.INFO)
    return aggregate_path


def _maybe_print_log_notice(verbose: bool, console_level: Optional[str], log_path: Path) -> None:
    """Inform user about logging destination and how to enable console logs."""
    if verbose or console_level:
        return
    console.print(f"[dim]Logs are written to {log_path}. Use -v or --log-level to enable console logs.[/dim]")


def iter_sources(paths: Iterable[str], source_dir: Path) -> Iterator[SourceFile]:
    """Turn path arguments into SourceFile records declared from ``source_dir``.

    Directories are yielded themselves and then walked recursively.
    """
    for raw in paths:
        path = Path(raw)
        if not path.is_absolute():
            path = source_dir / path
        path = path.resolve()
        yield SourceFile(path=path, cwd=source_dir)
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                yield SourceFile(path=child, cwd=source_dir)


def read_path_list(stream) -> Iterator[str]:
    """Yield non-blank lines of a path list."""
    for line in stream:
        line = line.strip()
        if line:
            yield line


@click.group()
@click.option(
    "--version",
    "-V",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose console logging (INFO)")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Console log level. By default, console logging is disabled.",
)
@click.option(
    "--source-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Source project directory (defaults to current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_level: Optional[str], source_dir: Optional[Path]) -> None:
    """Deploy Git - release build artifacts into a distribution repository."""
    log_path = setup_logging(verbose, console_level=log_level)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["console_level"] = log_level
    ctx.obj["log_path"] = log_path
    ctx.obj["source_dir"] = (source_dir or Path.cwd()).resolve()
    logger.debug(f"CLI init: cwd={Path.cwd()} source_dir={ctx.obj['source_dir']}")


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path())
@click.option(
    "--files-from",
    type=click.File("r"),
    help="Read additional paths, one per line, from FILE ('-' for stdin).",
)
@click.option("--repository", help="Distribution repository URL.")
@click.option("--prefix", help="Path prefix stripped from each file inside the distribution tree.")
@click.option("--release/--pre-release", "release", default=None, help="Release or pre-release run.")
@click.option(
    "--bump-version/--no-bump-version",
    "bump_version",
    default=None,
    help="Bump the source patch version after releasing (defaults to --release).",
)
@click.option(
    "--additional-package-file",
    "additional_package_files",
    multiple=True,
    help="Extra JSON metadata file whose version is bumped. Repeatable.",
)
@click.option("--npm-publish/--no-npm-publish", "npm_publish", default=None, help="Publish to npm on release runs.")
@click.option("--npm-registry", help="npm registry URL.")
@click.option("--branch", help="Branch to clone and push (default: master).")
@click.option("--debug/--no-debug", "debug", default=None, help="Log every command and its output.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON options file (defaults to deploy-git.json in the source directory).",
)
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory that receives the temporary distribution clone.",
)
@click.option("--dry-run", is_flag=True, help="Show what would be done without executing")
@click.pass_context
def release(
    ctx: click.Context,
    paths: Tuple[str, ...],
    files_from,
    repository: Optional[str],
    prefix: Optional[str],
    release: Optional[bool],
    bump_version: Optional[bool],
    additional_package_files: Tuple[str, ...],
    npm_publish: Optional[bool],
    npm_registry: Optional[str],
    branch: Optional[str],
    debug: Optional[bool],
    config_path: Optional[Path],
    work_dir: Optional[Path],
    dry_run: bool,
) -> None:
    """
    Release PATHS into the distribution repository.

    Example: deploy-git release --repository git@host:org/app-dist.git --prefix dist dist
    """
    source_dir: Path = ctx.obj["source_dir"]
    _maybe_print_log_notice(ctx.obj.get("verbose"), ctx.obj.get("console_level"), ctx.obj.get("log_path"))

    all_paths = list(paths)
    if files_from is not None:
        all_paths.extend(read_path_list(files_from))

    try:
        options = load_options(
            config_path,
            source_dir,
            repository=repository,
            prefix=prefix,
            release=release,
            bump_version=bump_version,
            additional_package_files=additional_package_files,
            npm_publish=npm_publish,
            npm_registry=npm_registry,
            branch=branch,
            debug=debug,
        )
        orchestrator = ReleaseOrchestrator(options, source_dir=source_dir, work_dir=work_dir)
        sources = iter_sources(all_paths, source_dir)

        if dry_run:
            _display_release_plan(orchestrator.plan(sources))
            console.print("\n✅ **Dry Run Complete** - No changes made", style="bold green")
            return

        outcome = orchestrator.run(sources)
    except DeployError as e:
        console.print(f"❌ {escape(str(e))}", style="bold red", soft_wrap=True)
        logger.debug("Release setup failed", exc_info=True)
        sys.exit(1)

    _display_outcome(outcome)
    if outcome.hard_failure:
        sys.exit(1)


@cli.command("resolve-version")
@click.option("--release/--pre-release", "release", default=None, help="Resolve as a release or pre-release.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON options file.",
)
@click.pass_context
def resolve_version(ctx: click.Context, release: Optional[bool], config_path: Optional[Path]) -> None:
    """Print the version a release run would use."""
    source_dir: Path = ctx.obj["source_dir"]
    try:
        options = load_options(config_path, source_dir, release=release)
        click.echo(VersionResolver(source_dir, options).resolve())
    except DeployError as e:
        console.print(f"❌ {escape(str(e))}", style="bold red", soft_wrap=True)
        sys.exit(1)


@cli.command()
def version() -> None:
    """Print the current deploy-git version."""
    console.print(f"deploy-git {PACKAGE_VERSION}")


def _display_release_plan(plan: ReleasePlan) -> None:
    """Display the release execution plan."""
    console.print(f"\n📋 **Release Plan** for version [bold]{plan.version}[/bold]")
    console.print(f"[dim]Distribution clone: {plan.clone_path}[/dim]")

    stages = Table(show_header=True, header_style="bold magenta")
    stages.add_column("Order", justify="center")
    stages.add_column("Stage", style="cyan")
    for i, state in enumerate(plan.stages, 1):
        stages.add_row(str(i), state.value.replace("_", " "))
    console.print(stages)

    files = Table(show_header=True, header_style="bold magenta")
    files.add_column("Source", style="dim")
    files.add_column("Destination", style="green")
    for release_file in plan.files:
        if release_file.source.is_dir():
            continue
        try:
            destination = release_file.destination.relative_to(plan.clone_path)
        except ValueError:
            destination = release_file.destination
        files.add_row(str(release_file.source), str(destination))
    console.print(files)


def _display_outcome(outcome: ReleaseOutcome) -> None:
    if outcome.succeeded:
        console.print(f"\n🎉 **Released {outcome.version}**", style="bold green")
        return
    if outcome.soft_failure:
        console.print(f"\n⚠️ {escape(str(outcome.error))}", style="magenta", soft_wrap=True)
        return
    stage = outcome.failed_state.value.replace("_", " ") if outcome.failed_state else "unknown stage"
    console.print(
        f"\n❌ **Release failed while {stage}:** {escape(str(outcome.error))}", style="bold red", soft_wrap=True
    )


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n\n🚫 **Operation cancelled by user**", style="bold yellow")
        logger.debug("Top-level cancellation (KeyboardInterrupt)", exc_info=True)
        sys.exit(130)
    except Exception as e:
        console.print(f"\n💥 **Unexpected error:** {e}", style="bold red")
        logger.debug("Unexpected error in main()", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
