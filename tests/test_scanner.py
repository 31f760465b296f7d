"""Tests for the manifest scanner, version writer and glob filtering."""

from __future__ import annotations

import asyncio
import codecs
from pathlib import Path

import pytest

from depsupdater.exceptions import VersionMismatchError
from depsupdater.scanner import scan
from depsupdater.scanner.globbing import GlobFilter
from depsupdater.scanner.models import DependencyType, VersionLocation
from depsupdater.scanner.parsers.global_json import GlobalJsonParser
from depsupdater.scanner.parsers.msbuild import MsBuildParser
from depsupdater.scanner.parsers.package_json import PackageJsonParser
from depsupdater.scanner.registry import PARSER_REGISTRY, discover_manifests
from depsupdater.scanner.writer import VersionWriter, replace_at

PACKAGE_JSON = """{
  "name": "demo",
  "version": "0.1.0",
  "dependencies": {
    "npm": "8.0.0",
    "left-pad": "^1.1.0"
  },
  "devDependencies": {
    "typescript": "~5.0.2",
    "local": "file:../local",
    "ranged": ">=2.0.0"
  },
  "scripts": {"dependencies": "not a section"}
}
"""

CSPROJ = """<Project Sdk="Microsoft.NET.Sdk">
  <ItemGroup>
    <PackageReference Include="Newtonsoft.Json" Version="12.0.1" />
    <PackageReference Include="Computed" Version="$(ComputedVersion)" />
    <PackageReference Include="Floating" Version="1.*" />
    <!-- <PackageReference Include="Commented" Version="1.0.0" /> -->
    <PackageReference Update="Updated.Pkg" Version='2.0.0' />
    <PackageReference Include="NoVersion" />
  </ItemGroup>
</Project>
"""

GLOBAL_JSON = """{
  "sdk": {
    "rollForward": "latestFeature",
    "version": "8.0.100"
  }
}
"""


# ── Parser registry ──────────────────────────────────────────────────────


class TestRegistry:
    def test_all_parsers_registered(self):
        assert {"package-json", "msbuild", "global-json"}.issubset(PARSER_REGISTRY)

    def test_discover_manifests(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "App.csproj").write_text("<Project />")
        (tmp_path / "global.json").write_text("{}")
        (tmp_path / "README.md").write_text("")

        matches = discover_manifests(tmp_path)
        found = {(p.detection_method, f.relative_to(tmp_path).as_posix()) for p, f in matches}
        assert found == {
            ("package-json", "package.json"),
            ("msbuild", "src/App.csproj"),
            ("global-json", "global.json"),
        }

    def test_node_modules_pruned_by_default(self, tmp_path):
        nested = tmp_path / "node_modules" / "dep"
        nested.mkdir(parents=True)
        (nested / "package.json").write_text("{}")
        (tmp_path / "package.json").write_text("{}")

        files = [f.relative_to(tmp_path).as_posix() for _, f in discover_manifests(tmp_path)]
        assert files == ["package.json"]


# ── Parsers ──────────────────────────────────────────────────────────────


class TestPackageJsonParser:
    @pytest.fixture
    def deps(self, tmp_path):
        f = tmp_path / "package.json"
        f.write_text(PACKAGE_JSON)
        return {d.name: d for d in PackageJsonParser().parse(f, PACKAGE_JSON)}

    def test_sections_collected(self, deps):
        assert set(deps) == {"npm", "left-pad", "typescript", "local", "ranged"}
        assert all(d.type is DependencyType.NPM for d in deps.values())

    def test_location_points_at_version_text(self, deps):
        lines = PACKAGE_JSON.split("\n")
        for dep in deps.values():
            line = lines[dep.location.line - 1]
            start = dep.location.column - 1
            assert line[start : start + len(dep.version)] == dep.version

    def test_updatable_flags(self, deps):
        assert deps["npm"].location.is_updatable
        assert deps["left-pad"].location.is_updatable
        assert deps["typescript"].location.is_updatable
        assert not deps["local"].location.is_updatable
        assert not deps["ranged"].location.is_updatable

    def test_invalid_json(self, tmp_path):
        assert PackageJsonParser().parse(tmp_path / "package.json", "{not json") == []


class TestMsBuildParser:
    @pytest.fixture
    def deps(self, tmp_path):
        f = tmp_path / "App.csproj"
        return {d.name: d for d in MsBuildParser().parse(f, CSPROJ)}

    def test_references_collected(self, deps):
        assert set(deps) == {"Newtonsoft.Json", "Computed", "Floating", "Updated.Pkg"}
        assert deps["Newtonsoft.Json"].version == "12.0.1"
        assert deps["Updated.Pkg"].version == "2.0.0"

    def test_computed_versions_not_updatable(self, deps):
        assert deps["Newtonsoft.Json"].location.is_updatable
        assert not deps["Computed"].location.is_updatable
        assert not deps["Floating"].location.is_updatable

    def test_location(self, deps):
        dep = deps["Newtonsoft.Json"]
        line = CSPROJ.split("\n")[dep.location.line - 1]
        assert line[dep.location.column - 1 :].startswith("12.0.1\"")


class TestGlobalJsonParser:
    def test_sdk_version(self, tmp_path):
        deps = GlobalJsonParser().parse(tmp_path / "global.json", GLOBAL_JSON)
        assert len(deps) == 1
        assert deps[0].type is DependencyType.DOTNET_SDK
        assert deps[0].version == "8.0.100"
        assert (deps[0].location.line, deps[0].location.column) == (4, 17)

    def test_no_sdk(self, tmp_path):
        assert GlobalJsonParser().parse(tmp_path / "global.json", '{"msbuild-sdks": {}}') == []


# ── Writer ───────────────────────────────────────────────────────────────


class TestVersionWriter:
    def test_replace_at(self, tmp_path):
        f = tmp_path / "package.json"
        f.write_text('{\n  "dependencies": {"a": "^1.0.0"}\n}\n')
        replace_at(VersionLocation(f, 2, 26), "^1.0.0", "1.2.0")
        assert f.read_text() == '{\n  "dependencies": {"a": "1.2.0"}\n}\n'

    def test_mismatch_raises(self, tmp_path):
        f = tmp_path / "package.json"
        f.write_text('{"a": "1.0.0"}')
        with pytest.raises(VersionMismatchError):
            replace_at(VersionLocation(f, 1, 8), "2.0.0", "3.0.0")
        assert f.read_text() == '{"a": "1.0.0"}'

    def test_bom_and_crlf_preserved(self, tmp_path):
        f = tmp_path / "global.json"
        f.write_bytes(codecs.BOM_UTF8 + b'{\r\n  "sdk": {"version": "8.0.100"}\r\n}\r\n')
        replace_at(VersionLocation(f, 2, 23), "8.0.100", "9.0.100")
        assert f.read_bytes() == codecs.BOM_UTF8 + b'{\r\n  "sdk": {"version": "9.0.100"}\r\n}\r\n'

    @pytest.mark.asyncio
    async def test_concurrent_writes_same_file(self, tmp_path):
        f = tmp_path / "package.json"
        f.write_text(PACKAGE_JSON)
        deps = [d for d in scan(tmp_path) if d.name in ("npm", "left-pad", "typescript")]

        await asyncio.gather(*(d.apply_version("9.9.9") for d in deps))

        rescanned = {d.name: d.version for d in scan(tmp_path)}
        assert rescanned["npm"] == "9.9.9"
        assert rescanned["left-pad"] == "9.9.9"
        assert rescanned["typescript"] == "9.9.9"
        assert rescanned["local"] == "file:../local"


# ── scan ─────────────────────────────────────────────────────────────────


class TestScan:
    def test_writer_attached_and_shared(self, tmp_path):
        (tmp_path / "package.json").write_text(PACKAGE_JSON)
        (tmp_path / "App.csproj").write_text(CSPROJ)
        deps = scan(tmp_path)
        writers = {id(d.writer) for d in deps}
        assert len(writers) == 1
        assert isinstance(deps[0].writer, VersionWriter)

    @pytest.mark.asyncio
    async def test_apply_version_updates_file_and_model(self, tmp_path):
        f = tmp_path / "package.json"
        f.write_text(PACKAGE_JSON)
        dep = next(d for d in scan(tmp_path) if d.name == "left-pad")

        await dep.apply_version("1.3.0")

        assert dep.version == "1.3.0"
        assert '"left-pad": "1.3.0"' in f.read_text()


# ── GlobFilter ───────────────────────────────────────────────────────────


class TestGlobFilter:
    def test_default_patterns(self):
        globs = GlobFilter.default()
        assert globs.matches("package.json")
        assert globs.matches("src/app/package.json")
        assert not globs.matches("node_modules/x/package.json")
        assert not globs.matches("web/node_modules/x/package.json")
        assert not globs.matches("e2e/.playwright/package/package.json")

    def test_should_recurse(self):
        globs = GlobFilter.default()
        assert globs.should_recurse("src")
        assert not globs.should_recurse("node_modules")
        assert not globs.should_recurse("web/node_modules")

    def test_custom_patterns_ignore_case(self):
        globs = GlobFilter(["**/*.csproj", "!**/legacy/**/*"], ignore_case=True)
        assert globs.matches("src/App.CSPROJ")
        assert globs.matches("App.csproj")
        assert not globs.matches("package.json")
        assert not globs.matches("Legacy/Old/Old.csproj")

    def test_iter_round_trips_patterns(self):
        assert list(GlobFilter.default()) == [
            "**/*",
            "!**/node_modules/**/*",
            "!**/.playwright/package/**/*",
        ]

    def test_only_exclusions_matches_nothing(self):
        assert not GlobFilter(["!**/x/**/*"]).matches("a.json")
