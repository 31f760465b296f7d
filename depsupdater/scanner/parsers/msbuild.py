"""Parser for MSBuild project files (PackageReference / PackageVersion)."""

from __future__ import annotations

import re
from pathlib import Path

from depsupdater.scanner.models import Dependency, DependencyType, VersionLocation
from depsupdater.scanner.parsers._json import line_column
from depsupdater.scanner.registry import register_parser

_COMMENT_RE = re.compile(r"<!--.*?-->", re.S)
_ITEM_RE = re.compile(r"<(PackageReference|PackageVersion)\b([^>]*)>", re.S)
_ATTR_RE = re.compile(r"\b(Include|Update|Version)\s*=\s*([\"'])(.*?)\2", re.S)

# Property references, wildcards and version ranges cannot be rewritten.
_COMPUTED_MARKERS = ("$(", "@(", "%(", "*", "[", "(")


class MsBuildParser:
    detection_method = "msbuild"
    file_patterns = ["*.csproj", "*.fsproj", "*.vbproj", "*.props", "*.targets"]

    def parse(self, file_path: Path, content: str) -> list[Dependency]:
        comments = [m.span() for m in _COMMENT_RE.finditer(content)]

        deps: list[Dependency] = []
        for item in _ITEM_RE.finditer(content):
            if any(start <= item.start() < end for start, end in comments):
                continue

            attrs: dict[str, tuple[str, int]] = {}
            for attr in _ATTR_RE.finditer(item.group(2)):
                attrs[attr.group(1)] = (attr.group(3), item.start(2) + attr.start(3))

            name = (attrs.get("Include") or attrs.get("Update") or (None, 0))[0]
            if "Version" not in attrs:
                continue
            version, offset = attrs["Version"]
            line, column = line_column(content, offset)
            updatable = bool(version.strip()) and not any(m in version for m in _COMPUTED_MARKERS)
            deps.append(
                Dependency(
                    name=name or None,
                    version=version,
                    type=DependencyType.NUGET,
                    location=VersionLocation(file_path, line, column, is_updatable=updatable),
                )
            )
        return deps


register_parser(MsBuildParser())
