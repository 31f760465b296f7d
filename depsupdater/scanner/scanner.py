"""Manifest scanner: find every version-pinned dependency under a root."""

from __future__ import annotations

from pathlib import Path

import structlog

# Ensure parsers are registered before any scan runs.
import depsupdater.scanner.parsers  # noqa: F401
from depsupdater.scanner.globbing import GlobFilter
from depsupdater.scanner.models import Dependency
from depsupdater.scanner.registry import discover_manifests
from depsupdater.scanner.writer import VersionWriter

log = structlog.get_logger("depsupdater.scanner")


def scan(
    root: Path,
    globs: GlobFilter | None = None,
    writer: VersionWriter | None = None,
) -> list[Dependency]:
    """Scan *root* for dependencies and attach *writer* to each of them."""
    writer = writer or VersionWriter()
    results: list[Dependency] = []
    for parser, file_path in discover_manifests(root, globs):
        try:
            content = file_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("scanner.unreadable", file=str(file_path), error=str(exc))
            continue
        parsed = parser.parse(file_path, content)
        for dep in parsed:
            dep.writer = writer
        log.debug(
            "scanner.parsed",
            file=str(file_path),
            parser=parser.detection_method,
            count=len(parsed),
        )
        results.extend(parsed)
    return results
