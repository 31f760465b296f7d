"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_NPM_REGISTRY = "https://registry.npmjs.org"
DEFAULT_NUGET_INDEX = "https://api.nuget.org/v3/index.json"
DEFAULT_DOTNET_RELEASES_INDEX = (
    "https://raw.githubusercontent.com/dotnet/core/main/release-notes/releases-index.json"
)


def _env_str(key: str, default: str) -> str:
    return os.environ.get(key) or default


def _env_float(key: str, default: float) -> float:
    return float(os.environ.get(key, default))


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


@dataclass(frozen=True)
class Settings:
    """Registry endpoints, HTTP timeout and worker count."""

    npm_registry: str = DEFAULT_NPM_REGISTRY
    nuget_index: str = DEFAULT_NUGET_INDEX
    dotnet_releases_index: str = DEFAULT_DOTNET_RELEASES_INDEX
    http_timeout: float = 30.0
    concurrency: int = 1

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``DEPSUPDATER_*`` environment variables."""
        concurrency = _env_int("DEPSUPDATER_CONCURRENCY", 1)
        if concurrency < 1:
            raise ValueError(f"DEPSUPDATER_CONCURRENCY must be >= 1, got {concurrency}")
        return cls(
            npm_registry=_env_str("DEPSUPDATER_NPM_REGISTRY", DEFAULT_NPM_REGISTRY).rstrip("/"),
            nuget_index=_env_str("DEPSUPDATER_NUGET_INDEX", DEFAULT_NUGET_INDEX),
            dotnet_releases_index=_env_str(
                "DEPSUPDATER_DOTNET_RELEASES_INDEX", DEFAULT_DOTNET_RELEASES_INDEX
            ),
            http_timeout=_env_float("DEPSUPDATER_HTTP_TIMEOUT", 30.0),
            concurrency=concurrency,
        )
