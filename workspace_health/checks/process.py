"""Subprocess helper shared by the git and cargo collaborators."""

from __future__ import annotations

import asyncio
import os
import signal
from dataclasses import dataclass
from pathlib import Path

from workspace_health.exceptions import CollaboratorError


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def _kill_group(proc: asyncio.subprocess.Process) -> None:
    # The session includes grandchildren (cargo's test binaries) that hold our pipes.
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    await proc.wait()


async def run_process(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """Run *cmd* in its own session and capture its output.

    A non-zero exit code is returned, not raised. ``CollaboratorError``
    is raised only when the process cannot be started or does not finish
    within *timeout* seconds. On timeout or cancellation every process in
    the session is killed before returning.
    """
    tool = cmd[0]
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as e:
        raise CollaboratorError(tool, f"could not start: {e}") from e

    finished = False
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        finished = True
    except asyncio.TimeoutError:
        raise CollaboratorError(tool, f"timed out after {timeout:g}s") from None
    finally:
        if not finished:
            await _kill_group(proc)

    return ProcessResult(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
