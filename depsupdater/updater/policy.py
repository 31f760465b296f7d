"""Upgrade-acceptance policy and best-candidate selection."""

from __future__ import annotations

from collections.abc import AsyncIterable, Callable
from typing import NamedTuple

from depsupdater.updater.versioning import SemanticVersion, parse_version

VersionParser = Callable[[str | None], SemanticVersion | None]


class VersionCandidate(NamedTuple):
    raw: str
    version: SemanticVersion


def accept(current: SemanticVersion | None, candidate: SemanticVersion) -> bool:
    """Whether *candidate* is an acceptable upgrade over *current*.

    - only strictly newer versions qualify;
    - a stable current version never moves onto a prerelease;
    - a prerelease current version may move to any newer version,
      prerelease or stable.

    An unknown (unparsable) current version accepts every candidate.
    """
    if current is None:
        return True

    if candidate <= current:
        return False

    if candidate.is_prerelease and not current.is_prerelease:
        return False

    # 1.0.0-alpha -> 1.0.0-beta and 1.0.0-alpha -> 2.0.0-beta are both accepted:
    # a prerelease track is not pinned to its major.minor.patch.
    return True


async def select_latest(
    current: SemanticVersion | None,
    versions: AsyncIterable[str],
    parse: VersionParser = parse_version,
) -> VersionCandidate | None:
    """Return the highest accepted candidate from *versions*.

    Unparsable strings are skipped. When two strings parse to the same
    version, the first one seen wins.
    """
    best: VersionCandidate | None = None
    async for raw in versions:
        parsed = parse(raw)
        if parsed is None or not accept(current, parsed):
            continue
        if best is None or best.version < parsed:
            best = VersionCandidate(raw, parsed)
    return best
