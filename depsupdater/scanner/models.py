"""Data models for the manifest scanner."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from depsupdater.exceptions import DepsUpdaterError

if TYPE_CHECKING:
    from depsupdater.scanner.writer import VersionWriter


class DependencyType(str, enum.Enum):
    """Ecosystems a dependency can belong to. Values double as CLI names."""

    NUGET = "NuGet"
    NPM = "Npm"
    DOTNET_SDK = "DotNetSdk"


@dataclass
class VersionLocation:
    """Where the version text of a dependency lives (1-based line/column)."""

    file_path: Path
    line: int
    column: int
    is_updatable: bool = True

    def __str__(self) -> str:
        return f"{self.file_path}:{self.line}:{self.column}"


@dataclass
class Dependency:
    """A single version-pinned reference found in a manifest file."""

    name: str | None
    version: str
    type: DependencyType
    location: VersionLocation
    writer: VersionWriter | None = field(default=None, repr=False, compare=False)

    async def apply_version(self, new_version: str) -> None:
        """Rewrite the version text in place and remember the new value."""
        if self.writer is None:
            raise DepsUpdaterError(f"dependency {self} has no writer attached")
        await self.writer.write(self.location, self.version, new_version)
        self.version = new_version

    def __str__(self) -> str:
        return f"{self.type.value}:{self.name}@{self.version} ({self.location})"
