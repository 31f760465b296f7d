"""Parser for global.json (.NET SDK pinning)."""

from __future__ import annotations

from pathlib import Path

from depsupdater.scanner.models import Dependency, DependencyType, VersionLocation
from depsupdater.scanner.parsers._json import iter_members, line_column, root_object, string_at
from depsupdater.scanner.registry import register_parser

SDK_DEPENDENCY_NAME = "dotnet-sdk"


class GlobalJsonParser:
    detection_method = "global-json"
    file_patterns = ["global.json"]

    def parse(self, file_path: Path, content: str) -> list[Dependency]:
        try:
            for key, value_at in iter_members(content, root_object(content)):
                if key != "sdk" or content[value_at] != "{":
                    continue
                for sdk_key, sdk_value_at in iter_members(content, value_at):
                    version = string_at(content, sdk_value_at)
                    if sdk_key != "version" or version is None:
                        continue
                    line, column = line_column(content, sdk_value_at + 1)
                    return [
                        Dependency(
                            name=SDK_DEPENDENCY_NAME,
                            version=version,
                            type=DependencyType.DOTNET_SDK,
                            location=VersionLocation(file_path, line, column),
                        )
                    ]
        except (ValueError, IndexError):
            return []
        return []


register_parser(GlobalJsonParser())
