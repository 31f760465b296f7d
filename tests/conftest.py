"""Shared pytest fixtures for depsupdater tests."""

from __future__ import annotations

import pytest

from depsupdater.scanner.models import VersionLocation


class RecordingWriter:
    """Stand-in for VersionWriter that records writes instead of touching files."""

    def __init__(self) -> None:
        self.writes: list[tuple[VersionLocation, str, str]] = []

    async def write(self, location: VersionLocation, old_version: str, new_version: str) -> None:
        self.writes.append((location, old_version, new_version))


@pytest.fixture
def recording_writer():
    return RecordingWriter()
