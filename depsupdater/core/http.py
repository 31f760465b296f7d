"""Shared HTTP client for registry queries."""

from __future__ import annotations

import httpx

from depsupdater import __version__
from depsupdater.core.config import Settings


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Build the process-wide ``httpx.AsyncClient``.

    One client is created at start-up and handed to every version source,
    so connection pools are shared across ecosystems. The caller owns its
    lifetime (``async with`` or ``aclose()``).
    """
    return httpx.AsyncClient(
        headers={"User-Agent": f"depsupdater/{__version__}"},
        timeout=settings.http_timeout,
        follow_redirects=True,
    )
