"""Lock-file regeneration after dependency updates."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import structlog

from depsupdater.core.process import run_tool
from depsupdater.scanner.models import DependencyType
from depsupdater.updater.models import UpdateOutcome

log = structlog.get_logger("depsupdater.lockfile")


class LockFileRegenerator(Protocol):
    async def regenerate(self, root: Path, outcomes: Sequence[UpdateOutcome]) -> None: ...


def find_lock_file(start_dir: Path, marker: str, stop_at: Path | None = None) -> Path | None:
    """Walk up from *start_dir* and return the first *marker* file found.

    The walk ends at *stop_at* (inclusive) when *start_dir* lies inside it,
    otherwise at the filesystem root.
    """
    current = start_dir.resolve()
    boundary = stop_at.resolve() if stop_at is not None else None
    if boundary is not None and not current.is_relative_to(boundary):
        boundary = None

    while True:
        candidate = current / marker
        if candidate.is_file():
            return candidate
        if current == boundary or current.parent == current:
            return None
        current = current.parent


def _lock_files_for(
    root: Path,
    outcomes: Sequence[UpdateOutcome],
    dep_type: DependencyType,
    marker: str,
) -> list[Path]:
    """Distinct lock files owning the updated files of *dep_type*, first-seen order."""
    seen_dirs: set[Path] = set()
    locks: dict[Path, None] = {}
    for outcome in outcomes:
        if outcome.dependency.type is not dep_type:
            continue
        directory = outcome.dependency.location.file_path.resolve().parent
        if directory in seen_dirs:
            continue
        seen_dirs.add(directory)
        lock = find_lock_file(directory, marker, stop_at=root)
        if lock is None:
            log.debug("lockfile.none", file=str(outcome.dependency.location.file_path))
            continue
        locks.setdefault(lock, None)
    return list(locks)


async def _run_and_report(cmd: list[str], lock_file: Path) -> bool:
    log.info("lockfile.regenerate", lock_file=str(lock_file), command=" ".join(cmd))
    try:
        result = await run_tool(cmd, cwd=lock_file.parent)
    except OSError as exc:
        log.warning("lockfile.tool_unavailable", lock_file=str(lock_file), error=str(exc))
        return False
    if not result.ok:
        log.warning(
            "lockfile.tool_failed",
            lock_file=str(lock_file),
            exit_code=result.exit_code,
            output=result.output,
        )
        return False
    return True


class NpmLockFile:
    """``npm install --no-audit --force`` next to each ``package-lock.json``."""

    marker = "package-lock.json"

    def __init__(self, executable: str | None = None) -> None:
        self._npm = executable or shutil.which("npm") or "npm"

    async def regenerate(self, root: Path, outcomes: Sequence[UpdateOutcome]) -> None:
        for lock_file in _lock_files_for(root, outcomes, DependencyType.NPM, self.marker):
            await _run_and_report([self._npm, "install", "--no-audit", "--force"], lock_file)


class NuGetLockFile:
    """``dotnet restore --no-cache`` for every project next to a ``packages.lock.json``.

    Updates in shared MSBuild files (``Directory.Packages.props`` and the
    like) affect every project below them, so each lock file under such a
    file's directory is restored too.
    """

    marker = "packages.lock.json"
    project_patterns = ("*.csproj", "*.fsproj", "*.vbproj")
    shared_suffixes = (".props", ".targets")

    def __init__(self, executable: str | None = None) -> None:
        self._dotnet = executable or shutil.which("dotnet") or "dotnet"

    def lock_files(self, root: Path, outcomes: Sequence[UpdateOutcome]) -> list[Path]:
        locks = dict.fromkeys(_lock_files_for(root, outcomes, DependencyType.NUGET, self.marker))
        shared_dirs: dict[Path, None] = {}
        for outcome in outcomes:
            file_path = outcome.dependency.location.file_path
            if outcome.dependency.type is DependencyType.NUGET and (
                file_path.suffix.lower() in self.shared_suffixes
            ):
                shared_dirs.setdefault(file_path.resolve().parent, None)
        for directory in shared_dirs:
            for lock in sorted(directory.rglob(self.marker)):
                if lock.is_file():
                    locks.setdefault(lock.resolve(), None)
        return list(locks)

    async def regenerate(self, root: Path, outcomes: Sequence[UpdateOutcome]) -> None:
        for lock_file in self.lock_files(root, outcomes):
            projects = sorted(
                p for pattern in self.project_patterns for p in lock_file.parent.glob(pattern)
            )
            if not projects:
                log.warning("lockfile.no_projects", lock_file=str(lock_file))
            for project in projects:
                await _run_and_report(
                    [self._dotnet, "restore", str(project), "--no-cache"], lock_file
                )


class NoLockFile:
    """Ecosystems without a lock artifact."""

    async def regenerate(self, root: Path, outcomes: Sequence[UpdateOutcome]) -> None:
        return None
