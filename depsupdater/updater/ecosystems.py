"""Ecosystem updaters and the dispatch chain that tries them in order."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

import httpx
import structlog

from depsupdater.core.config import Settings
from depsupdater.scanner.models import Dependency, DependencyType
from depsupdater.updater.lockfiles import (
    LockFileRegenerator,
    NoLockFile,
    NpmLockFile,
    NuGetLockFile,
)
from depsupdater.updater.models import UpdateOutcome
from depsupdater.updater.policy import VersionParser, select_latest
from depsupdater.updater.sources import (
    DotNetSdkVersionSource,
    NpmVersionSource,
    NuGetVersionSource,
    VersionSource,
)
from depsupdater.updater.versioning import parse_npm_version, parse_version

log = structlog.get_logger("depsupdater.updater")


@dataclass(frozen=True)
class EcosystemUpdater:
    """Binds a version source, a version parser and a lock-file regenerator to one ecosystem.

    Holds no per-dependency state; one instance serves a whole run.
    """

    type: DependencyType
    source: VersionSource
    lock_files: LockFileRegenerator
    parse: VersionParser = parse_version

    def supports(self, dependency: Dependency) -> bool:
        return dependency.name is not None and dependency.type is self.type

    async def update(self, dependency: Dependency) -> str | None:
        """Upgrade *dependency* to the best accepted version.

        Returns the new version text, or None when the dependency belongs
        to another ecosystem or no newer acceptable version exists. Registry
        errors propagate.
        """
        if not self.supports(dependency):
            return None

        current = self.parse(dependency.version)
        best = await select_latest(current, self.source.versions(dependency.name), self.parse)
        if best is None:
            return None

        await dependency.apply_version(best.raw)
        return best.raw

    async def update_lock_files(self, root: Path, outcomes: Sequence[UpdateOutcome]) -> None:
        await self.lock_files.regenerate(root, outcomes)


EcosystemFactory = Callable[[httpx.AsyncClient, Settings], EcosystemUpdater]


def _npm(client: httpx.AsyncClient, settings: Settings) -> EcosystemUpdater:
    return EcosystemUpdater(
        type=DependencyType.NPM,
        source=NpmVersionSource(client, settings.npm_registry),
        lock_files=NpmLockFile(),
        parse=parse_npm_version,
    )


def _nuget(client: httpx.AsyncClient, settings: Settings) -> EcosystemUpdater:
    return EcosystemUpdater(
        type=DependencyType.NUGET,
        source=NuGetVersionSource(client, settings.nuget_index),
        lock_files=NuGetLockFile(),
    )


def _dotnet_sdk(client: httpx.AsyncClient, settings: Settings) -> EcosystemUpdater:
    return EcosystemUpdater(
        type=DependencyType.DOTNET_SDK,
        source=DotNetSdkVersionSource(client, settings.dotnet_releases_index),
        lock_files=NoLockFile(),
    )


# Dispatch table, in chain order.
ECOSYSTEMS: dict[DependencyType, EcosystemFactory] = {
    DependencyType.NPM: _npm,
    DependencyType.NUGET: _nuget,
    DependencyType.DOTNET_SDK: _dotnet_sdk,
}


def build_updaters(client: httpx.AsyncClient, settings: Settings) -> list[EcosystemUpdater]:
    """Instantiate the dispatch chain: npm, NuGet, .NET SDK."""
    return [factory(client, settings) for factory in ECOSYSTEMS.values()]


async def dispatch(updaters: Sequence[EcosystemUpdater], dependency: Dependency) -> str | None:
    """Try each updater in order until one updates *dependency*."""
    for updater in updaters:
        new_version = await updater.update(dependency)
        if new_version is not None:
            return new_version
    return None
