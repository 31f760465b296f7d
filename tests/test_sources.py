"""Tests for the registry version sources (mocked HTTP transport)."""

from __future__ import annotations

import httpx
import pydantic
import pytest

from depsupdater.exceptions import RegistryProtocolError
from depsupdater.updater.sources import (
    DotNetSdkVersionSource,
    NpmVersionSource,
    NuGetVersionSource,
    VersionSource,
)

NPM = "https://registry.test"
NUGET_INDEX = "https://nuget.test/v3/index.json"
NUGET_BASE = "https://nuget.test/v3-flatcontainer/"
DOTNET_INDEX = "https://dotnet.test/releases-index.json"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _collect(source: VersionSource, package_id: str) -> list[str]:
    return [v async for v in source.versions(package_id)]


# ── npm ──────────────────────────────────────────────────────────────────


class TestNpmVersionSource:
    @pytest.mark.asyncio
    async def test_yields_version_keys(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url == httpx.URL(f"{NPM}/left-pad")
            return httpx.Response(
                200, json={"name": "left-pad", "versions": {"1.0.0": {}, "1.1.0": {"x": 1}}}
            )

        async with _client(handler) as client:
            versions = await _collect(NpmVersionSource(client, NPM), "left-pad")
        assert versions == ["1.0.0", "1.1.0"]

    @pytest.mark.asyncio
    async def test_scoped_package_escapes_slash(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"versions": {}})

        async with _client(handler) as client:
            await _collect(NpmVersionSource(client, NPM), "@types/node")
        assert [url.lower() for url in seen] == [f"{NPM}/@types%2fnode"]

    @pytest.mark.parametrize("status", [400, 404])
    @pytest.mark.asyncio
    async def test_not_found_is_empty(self, status):
        async with _client(lambda r: httpx.Response(status)) as client:
            assert await _collect(NpmVersionSource(client, NPM), "nope") == []

    @pytest.mark.parametrize("status", [401, 500, 503])
    @pytest.mark.asyncio
    async def test_other_errors_raise(self, status):
        async with _client(lambda r: httpx.Response(status)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await _collect(NpmVersionSource(client, NPM), "pkg")

    @pytest.mark.asyncio
    async def test_malformed_document_raises(self):
        async with _client(lambda r: httpx.Response(200, json={"versions": ["1.0.0"]})) as client:
            with pytest.raises(pydantic.ValidationError):
                await _collect(NpmVersionSource(client, NPM), "pkg")

    @pytest.mark.asyncio
    async def test_non_json_body_raises_validation_error(self):
        async with _client(lambda r: httpx.Response(200, text="<html>oops</html>")) as client:
            with pytest.raises(pydantic.ValidationError):
                await _collect(NpmVersionSource(client, NPM), "pkg")

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        async with _client(handler) as client:
            with pytest.raises(httpx.ConnectError):
                await _collect(NpmVersionSource(client, NPM), "pkg")


# ── NuGet ────────────────────────────────────────────────────────────────


def _nuget_handler(calls: list[httpx.Request], versions: dict[str, list[str]]):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        url = str(request.url)
        if url == NUGET_INDEX:
            return httpx.Response(
                200,
                json={
                    "version": "3.0.0",
                    "resources": [
                        {"@id": "https://nuget.test/query", "@type": "SearchQueryService"},
                        {"@id": NUGET_BASE, "@type": "PackageBaseAddress/3.0.0"},
                    ],
                },
            )
        for package_id, listed in versions.items():
            if url == f"{NUGET_BASE}{package_id}/index.json":
                return httpx.Response(200, json={"versions": listed})
        return httpx.Response(404)

    return handler


class TestNuGetVersionSource:
    @pytest.mark.asyncio
    async def test_lists_flat_container_versions(self):
        calls: list[httpx.Request] = []
        handler = _nuget_handler(calls, {"newtonsoft.json": ["12.0.1", "13.0.3"]})
        async with _client(handler) as client:
            versions = await _collect(NuGetVersionSource(client, NUGET_INDEX), "Newtonsoft.Json")
        assert versions == ["12.0.1", "13.0.3"]
        assert all(r.headers["Cache-Control"] == "no-cache" for r in calls)

    @pytest.mark.asyncio
    async def test_service_index_resolved_once(self):
        calls: list[httpx.Request] = []
        handler = _nuget_handler(calls, {"a": ["1.0.0"], "b": ["2.0.0"]})
        async with _client(handler) as client:
            source = NuGetVersionSource(client, NUGET_INDEX)
            await _collect(source, "a")
            await _collect(source, "b")
        assert [str(r.url) for r in calls].count(NUGET_INDEX) == 1

    @pytest.mark.asyncio
    async def test_unknown_package_is_empty(self):
        handler = _nuget_handler([], {})
        async with _client(handler) as client:
            assert await _collect(NuGetVersionSource(client, NUGET_INDEX), "missing") == []

    @pytest.mark.asyncio
    async def test_missing_base_address_resource(self):
        handler = lambda r: httpx.Response(200, json={"resources": []})  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(RegistryProtocolError):
                await _collect(NuGetVersionSource(client, NUGET_INDEX), "a")

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        async with _client(lambda r: httpx.Response(502)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await _collect(NuGetVersionSource(client, NUGET_INDEX), "a")


# ── .NET SDK ─────────────────────────────────────────────────────────────


class TestDotNetSdkVersionSource:
    @pytest.mark.asyncio
    async def test_latest_sdk_of_each_channel(self):
        document = {
            "releases-index": [
                {"channel-version": "9.0", "latest-sdk": "9.0.100"},
                {"channel-version": "8.0", "latest-sdk": "8.0.403"},
                {"channel-version": "1.0", "latest-sdk": None},
            ]
        }
        async with _client(lambda r: httpx.Response(200, json=document)) as client:
            source = DotNetSdkVersionSource(client, DOTNET_INDEX)
            assert await _collect(source, "dotnet-sdk") == ["9.0.100", "8.0.403"]
            assert await _collect(source, "anything") == ["9.0.100", "8.0.403"]

    @pytest.mark.asyncio
    async def test_missing_index_key_raises(self):
        async with _client(lambda r: httpx.Response(200, json={})) as client:
            with pytest.raises(pydantic.ValidationError):
                await _collect(DotNetSdkVersionSource(client, DOTNET_INDEX), "dotnet-sdk")
