"""Registry version sources: list the published versions of a package."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from depsupdater.exceptions import RegistryProtocolError

log = structlog.get_logger("depsupdater.sources")

_NO_CACHE = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
_NPM_ABBREVIATED = "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8"
_NUGET_PACKAGE_BASE_TYPES = ("PackageBaseAddress/3.0.0",)


@runtime_checkable
class VersionSource(Protocol):
    """Lazily yields raw version strings published for a package."""

    def versions(self, package_id: str) -> AsyncIterator[str]: ...


# ── response schemas ────────────────────────────────────────────────────


class NpmPackument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    versions: dict[str, Any] = Field(default_factory=dict)


class NuGetServiceResource(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="@id")
    type: str = Field(alias="@type")


class NuGetServiceIndex(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resources: list[NuGetServiceResource]


class NuGetVersionIndex(BaseModel):
    model_config = ConfigDict(extra="ignore")

    versions: list[str] = Field(default_factory=list)


class DotNetReleaseEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    channel_version: str | None = Field(default=None, alias="channel-version")
    latest_sdk: str | None = Field(default=None, alias="latest-sdk")


class DotNetReleaseIndex(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    releases: list[DotNetReleaseEntry] = Field(alias="releases-index")


# ── sources ─────────────────────────────────────────────────────────────


class NpmVersionSource:
    """Versions from the npm registry package document."""

    def __init__(self, client: httpx.AsyncClient, registry: str) -> None:
        self._client = client
        self._registry = registry.rstrip("/")

    def package_url(self, package_id: str) -> str:
        # scoped packages: @scope/name -> @scope%2fname
        return f"{self._registry}/{quote(package_id, safe='@')}"

    async def versions(self, package_id: str) -> AsyncIterator[str]:
        resp = await self._client.get(
            self.package_url(package_id), headers={"Accept": _NPM_ABBREVIATED}
        )
        if resp.status_code in (400, 404):
            log.debug("npm.not_found", package=package_id, status=resp.status_code)
            return
        resp.raise_for_status()

        document = NpmPackument.model_validate_json(resp.content)
        for version in document.versions:
            yield version


class NuGetVersionSource:
    """Versions from the NuGet v3 flat container (``PackageBaseAddress``)."""

    def __init__(self, client: httpx.AsyncClient, service_index: str) -> None:
        self._client = client
        self._service_index = service_index
        self._base_address: str | None = None

    async def _resolve_base_address(self) -> str:
        if self._base_address is None:
            resp = await self._client.get(self._service_index, headers=_NO_CACHE)
            resp.raise_for_status()
            index = NuGetServiceIndex.model_validate_json(resp.content)
            for resource in index.resources:
                if resource.type in _NUGET_PACKAGE_BASE_TYPES:
                    self._base_address = resource.id.rstrip("/") + "/"
                    break
            else:
                raise RegistryProtocolError(
                    f"service index {self._service_index} has no PackageBaseAddress resource"
                )
        return self._base_address

    async def versions(self, package_id: str) -> AsyncIterator[str]:
        base = await self._resolve_base_address()
        url = f"{base}{quote(package_id.lower(), safe='')}/index.json"
        resp = await self._client.get(url, headers=_NO_CACHE)
        if resp.status_code == 404:
            log.debug("nuget.not_found", package=package_id)
            return
        resp.raise_for_status()

        for version in NuGetVersionIndex.model_validate_json(resp.content).versions:
            yield version


class DotNetSdkVersionSource:
    """Latest SDK of every .NET release channel.

    The package id is ignored: every SDK dependency sees the same list.
    """

    def __init__(self, client: httpx.AsyncClient, releases_index: str) -> None:
        self._client = client
        self._releases_index = releases_index

    async def versions(self, package_id: str) -> AsyncIterator[str]:
        resp = await self._client.get(self._releases_index)
        resp.raise_for_status()

        index = DotNetReleaseIndex.model_validate_json(resp.content)
        for release in index.releases:
            if release.latest_sdk:
                yield release.latest_sdk
