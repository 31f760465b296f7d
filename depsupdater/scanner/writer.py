"""In-place version rewriting at a recorded file location."""

from __future__ import annotations

import asyncio
import codecs
from pathlib import Path

from depsupdater.exceptions import VersionMismatchError
from depsupdater.scanner.models import VersionLocation


class VersionWriter:
    """Replaces version text at ``(line, column)`` positions.

    One writer is shared by every dependency of a scan. Writes to the same
    file are serialized so that concurrent updates never interleave their
    read-modify-write cycles.
    """

    def __init__(self) -> None:
        self._locks: dict[Path, asyncio.Lock] = {}

    def _lock_for(self, path: Path) -> asyncio.Lock:
        return self._locks.setdefault(path.resolve(), asyncio.Lock())

    async def write(self, location: VersionLocation, old_version: str, new_version: str) -> None:
        async with self._lock_for(location.file_path):
            await asyncio.to_thread(replace_at, location, old_version, new_version)


def replace_at(location: VersionLocation, old_version: str, new_version: str) -> None:
    """Synchronously swap *old_version* for *new_version* at *location*.

    Raises :class:`VersionMismatchError` when the file no longer holds
    *old_version* at that position.
    """
    raw = location.file_path.read_bytes()
    bom = codecs.BOM_UTF8 if raw.startswith(codecs.BOM_UTF8) else b""
    text = raw[len(bom):].decode("utf-8")

    lines = text.split("\n")
    index = location.line - 1
    start = location.column - 1
    found = lines[index][start : start + len(old_version)] if 0 <= index < len(lines) else ""
    if found != old_version:
        raise VersionMismatchError(
            str(location.file_path), location.line, location.column, old_version, found
        )

    line = lines[index]
    lines[index] = line[:start] + new_version + line[start + len(old_version) :]
    location.file_path.write_bytes(bom + "\n".join(lines).encode("utf-8"))
