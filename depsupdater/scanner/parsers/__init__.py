"""Manifest parsers: auto-registered on import."""

from depsupdater.scanner.parsers import (
    global_json,  # noqa: F401
    msbuild,  # noqa: F401
    package_json,  # noqa: F401
)
