"""NuGet-compatible semantic versions on top of :mod:`semver`.

Accepts 1 to 4 numeric components (missing ones are 0), optional
``-prerelease`` labels and ``+metadata``. ``semver`` handles the
major.minor.patch core, prerelease precedence and metadata; NuGet's fourth
``revision`` component sits between the core and the prerelease, and
prerelease labels compare case-insensitively.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

import semver

# 1.2.3.4[-pre][+meta]: split off the revision before handing the rest to semver
_REVISION_RE = re.compile(r"^(?P<core>\d+\.\d+\.\d+)\.(?P<revision>\d+)(?=$|[-+])")

_NPM_RANGE_PREFIXES = ("~", "^")


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    version: semver.Version
    revision: int = 0

    @property
    def major(self) -> int:
        return self.version.major

    @property
    def minor(self) -> int:
        return self.version.minor

    @property
    def patch(self) -> int:
        return self.version.patch

    @property
    def prerelease(self) -> tuple[str, ...]:
        pre = self.version.prerelease
        return tuple(pre.split(".")) if pre else ()

    @property
    def metadata(self) -> str | None:
        return self.version.build

    @property
    def is_prerelease(self) -> bool:
        return self.version.prerelease is not None

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def _release(self) -> tuple[int, int, int, int]:
        return (*self.core, self.revision)

    def _folded(self) -> semver.Version:
        pre = self.version.prerelease
        return self.version.replace(prerelease=pre.lower() if pre else None, build=None)

    def compare(self, other: SemanticVersion) -> int:
        mine, theirs = self._release(), other._release()
        if mine != theirs:
            return -1 if mine < theirs else 1
        return self._folded().compare(other._folded())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        pre = self.version.prerelease
        return hash((self._release(), pre.lower() if pre else None))

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.version.prerelease:
            text += f"-{self.version.prerelease}"
        if self.version.build:
            text += f"+{self.version.build}"
        return text


def parse_version(value: str | None) -> SemanticVersion | None:
    """Parse *value*, returning None for anything that is not a version."""
    if value is None:
        return None
    text = value.strip()
    revision = 0
    match = _REVISION_RE.match(text)
    if match is not None:
        revision = int(match.group("revision"))
        text = match.group("core") + text[match.end():]
    try:
        version = semver.Version.parse(text, optional_minor_and_patch=True)
    except ValueError:
        return None
    return SemanticVersion(version, revision)


def parse_npm_version(value: str | None) -> SemanticVersion | None:
    """Like :func:`parse_version`, ignoring a leading ``~`` or ``^`` range operator."""
    if value is not None and value.startswith(_NPM_RANGE_PREFIXES):
        value = value[1:]
    return parse_version(value)
