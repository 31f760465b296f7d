"""Subprocess helper for external package-manager tools."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ToolResult:
    """Exit code and combined stdout/stderr of a finished tool run."""

    args: list[str]
    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


async def run_tool(cmd: list[str], cwd: Path) -> ToolResult:
    """Run *cmd* in *cwd* and capture its output.

    Non-zero exit codes are returned, not raised. If the awaiting task is
    cancelled the child process is killed and reaped before the
    cancellation propagates.

    Raises ``FileNotFoundError`` / ``PermissionError`` when the executable
    cannot be started.
    """
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=str(cwd),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        stdout, _ = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise
    return ToolResult(
        args=list(cmd),
        exit_code=proc.returncode if proc.returncode is not None else -1,
        output=stdout.decode(errors="replace").strip() if stdout else "",
    )
