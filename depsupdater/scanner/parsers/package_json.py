"""Parser for npm package.json files."""

from __future__ import annotations

import re
from pathlib import Path

from depsupdater.scanner.models import Dependency, DependencyType, VersionLocation
from depsupdater.scanner.parsers._json import iter_members, line_column, root_object, string_at
from depsupdater.scanner.registry import register_parser

_SECTIONS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")

# Exact versions, optionally with a caret/tilde range prefix.
_PINNED_RE = re.compile(r"^[~^]?\d+(\.\d+){0,3}(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?$")


class PackageJsonParser:
    detection_method = "package-json"
    file_patterns = ["package.json"]

    def parse(self, file_path: Path, content: str) -> list[Dependency]:
        deps: list[Dependency] = []
        try:
            for section, section_at in iter_members(content, root_object(content)):
                if section not in _SECTIONS or content[section_at] != "{":
                    continue
                for name, value_at in iter_members(content, section_at):
                    version = string_at(content, value_at)
                    if version is None:
                        continue
                    line, column = line_column(content, value_at + 1)
                    deps.append(
                        Dependency(
                            name=name,
                            version=version,
                            type=DependencyType.NPM,
                            location=VersionLocation(
                                file_path=file_path,
                                line=line,
                                column=column,
                                is_updatable=bool(_PINNED_RE.match(version)),
                            ),
                        )
                    )
        except (ValueError, IndexError):
            return []
        return deps


register_parser(PackageJsonParser())
