"""Manifest scanner: detect version-pinned dependencies and rewrite them in place."""

from depsupdater.scanner.globbing import GlobFilter
from depsupdater.scanner.models import Dependency, DependencyType, VersionLocation
from depsupdater.scanner.scanner import scan
from depsupdater.scanner.writer import VersionWriter

__all__ = [
    "Dependency",
    "DependencyType",
    "GlobFilter",
    "VersionLocation",
    "VersionWriter",
    "scan",
]
