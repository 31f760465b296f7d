"""CLI entry point: depsupdater.

Subcommands:
    depsupdater update                                   # update everything under cwd
    depsupdater update --directory src --update-lock-files
    depsupdater update --dependency-type Npm,NuGet      # restrict ecosystems
    depsupdater update --files "**/*.csproj" --files "!**/legacy/**/*"
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import re
import signal
from pathlib import Path

import click
import httpx
import pydantic
import structlog

from depsupdater.core.config import Settings
from depsupdater.core.http import create_http_client
from depsupdater.core.logging import setup_logging
from depsupdater.exceptions import DepsUpdaterError, UnknownDependencyTypeError
from depsupdater.scanner import DependencyType, GlobFilter, scan
from depsupdater.updater import UpdateRunner, build_updaters

log = structlog.get_logger("depsupdater.cli")

_TYPE_SEPARATORS = re.compile(r"[,; ]+")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def parse_dependency_types(values: tuple[str, ...] | list[str]) -> list[DependencyType]:
    """Parse ``--dependency-type`` values (``,``/``;``/space separated, case-insensitive)."""
    by_name = {t.value.lower(): t for t in DependencyType}
    types: list[DependencyType] = []
    for value in values:
        for token in _TYPE_SEPARATORS.split(value.strip()):
            if not token:
                continue
            dep_type = by_name.get(token.lower())
            if dep_type is None:
                raise UnknownDependencyTypeError(token, [t.value for t in DependencyType])
            if dep_type not in types:
                types.append(dep_type)
    return types


async def _update(
    root: Path,
    globs: GlobFilter,
    types: list[DependencyType],
    update_lock_files: bool,
    settings: Settings,
) -> int:
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    # add_signal_handler is unavailable on Windows event loops
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, cancel.set)

    dependencies = await asyncio.to_thread(scan, root, globs)
    click.echo(f"{len(dependencies)} dependencies found")
    ordered = sorted(dependencies, key=lambda d: (d.type.value, d.name or "", d.version))
    for dep in ordered:
        click.echo(f"- {dep}")

    try:
        async with create_http_client(settings) as client:
            runner = UpdateRunner(
                build_updaters(client, settings), concurrency=settings.concurrency
            )
            result = await runner.run(
                dependencies,
                root,
                types=types,
                update_lock_files=update_lock_files,
                cancel=cancel,
            )
    except (httpx.HTTPError, pydantic.ValidationError, DepsUpdaterError) as exc:
        log.error("update.failed", error=str(exc), error_type=type(exc).__name__)
        return EXIT_FAILED
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)

    for outcome in result.outcomes:
        click.echo(f"Updated {outcome.dependency.name} -> {outcome.new_version}")
    click.echo(f"{result.updated} of {result.eligible} dependencies updated")
    return EXIT_CANCELLED if result.cancelled else EXIT_OK


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """depsupdater: upgrade pinned NuGet, npm and .NET SDK dependencies."""
    try:
        setup_logging("DEBUG" if verbose else None)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@main.command("update")
@click.option(
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Root directory (default: current directory)",
)
@click.option(
    "--files",
    multiple=True,
    help="Glob patterns to find files to update; prefix with ! to exclude",
)
@click.option(
    "--dependency-type",
    "dependency_types",
    multiple=True,
    help=", ".join(t.value for t in DependencyType),
)
@click.option("--update-lock-files", is_flag=True, help="Regenerate lock files afterwards")
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Dependencies updated in parallel (default: DEPSUPDATER_CONCURRENCY or 1)",
)
@click.pass_context
def update(
    ctx: click.Context,
    directory: Path | None,
    files: tuple[str, ...],
    dependency_types: tuple[str, ...],
    update_lock_files: bool,
    concurrency: int | None,
) -> None:
    """Update dependencies."""
    try:
        types = parse_dependency_types(dependency_types)
    except UnknownDependencyTypeError as exc:
        raise click.BadParameter(str(exc), param_hint="--dependency-type") from exc

    globs = GlobFilter(files, ignore_case=True) if files else GlobFilter.default()
    root = (directory or Path.cwd()).resolve()

    settings = Settings.from_env()
    if concurrency is not None:
        settings = dataclasses.replace(settings, concurrency=concurrency)

    if types:
        click.echo("Updating: " + ",".join(t.value for t in types))
    click.echo("Searching in:")
    for pattern in globs:
        click.echo(f"- {pattern}")

    ctx.exit(asyncio.run(_update(root, globs, types, update_lock_files, settings)))


if __name__ == "__main__":
    main()
