"""Parser registry: discover manifest files and match them to parsers."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path
from typing import Protocol, runtime_checkable

from depsupdater.scanner.globbing import GlobFilter
from depsupdater.scanner.models import Dependency


@runtime_checkable
class ManifestParser(Protocol):
    """Interface that every manifest parser must satisfy.

    ``file_patterns`` are matched against file names (not paths).
    """

    detection_method: str
    file_patterns: list[str]

    def parse(self, file_path: Path, content: str) -> list[Dependency]: ...


PARSER_REGISTRY: dict[str, ManifestParser] = {}


def register_parser(parser: ManifestParser) -> None:
    """Register a parser instance by its detection_method."""
    PARSER_REGISTRY[parser.detection_method] = parser


def discover_manifests(
    root: Path, globs: GlobFilter | None = None
) -> list[tuple[ManifestParser, Path]]:
    """Walk *root* and match in-scope files to registered parsers.

    Directories rejected by *globs* are pruned from the walk. Returns a
    list of (parser, matched_file) pairs in a stable order.
    """
    globs = globs or GlobFilter.default()
    matches: list[tuple[ManifestParser, Path]] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        if rel_dir == ".":
            rel_dir = ""
        dirnames[:] = sorted(
            d for d in dirnames if globs.should_recurse(f"{rel_dir}/{d}" if rel_dir else d)
        )
        for filename in sorted(filenames):
            rel = f"{rel_dir}/{filename}" if rel_dir else filename
            if not globs.matches(rel):
                continue
            for parser in PARSER_REGISTRY.values():
                if any(fnmatch(filename, pattern) for pattern in parser.file_patterns):
                    matches.append((parser, current / filename))
    return matches
