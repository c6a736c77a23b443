"""Probe runner: one bounded, fail-soft ``git`` query."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from gitbuddy.health.constants import MAX_OUTPUT, READ_CHUNK, TIMEOUT_DEFAULT

logger = logging.getLogger("gitbuddy.probe")


@dataclass(frozen=True)
class Probe:
    """A query definition: arguments, timeout, output cap.

    ``args`` follow ``program``, which is ``git`` for every collector.
    """

    args: tuple[str, ...]
    timeout: float = TIMEOUT_DEFAULT
    max_output: int = MAX_OUTPUT
    program: str = "git"

    def __str__(self) -> str:
        return " ".join((self.program, *self.args))


@dataclass(frozen=True)
class ProbeSuccess:
    output: str

    def lines(self) -> list[str]:
        return [line for line in self.output.splitlines() if line.strip()]


@dataclass(frozen=True)
class ProbeFailure:
    reason: str


ProbeResult = Union[ProbeSuccess, ProbeFailure]


def _truncate(data: bytes, limit: int) -> bytes:
    """Cap output at ``limit`` bytes, cut back to the last complete line."""
    if len(data) <= limit:
        return data
    cut = data.rfind(b"\n", 0, limit)
    return data[: cut + 1] if cut >= 0 else b""


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


async def _collect(proc: asyncio.subprocess.Process, limit: int) -> tuple[bytes, bool]:
    """Read stdout until EOF or until more than ``limit`` bytes arrived.

    Past the cap the child is killed, so memory stays bounded by
    ``limit + READ_CHUNK``. Returns the bytes read and whether the cap hit.
    """
    buf = bytearray()
    while True:
        chunk = await proc.stdout.read(READ_CHUNK)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > limit:
            _kill(proc)
            await proc.wait()
            return bytes(buf), True
    await proc.wait()
    return bytes(buf), False


async def run_probe(probe: Probe, cwd: str | Path) -> ProbeResult:
    """Run ``probe`` in ``cwd``. Never raises: every failure is a ProbeFailure."""
    try:
        proc = await asyncio.create_subprocess_exec(
            probe.program,
            *probe.args,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug("%s could not start: %s", probe, e)
        return ProbeFailure(reason=f"exec: {e}")

    try:
        stdout, capped = await asyncio.wait_for(
            _collect(proc, probe.max_output), timeout=probe.timeout
        )
    except asyncio.TimeoutError:
        logger.debug("%s timed out after %.1fs", probe, probe.timeout)
        _kill(proc)
        await proc.wait()
        return ProbeFailure(reason=f"timeout ({probe.timeout}s)")

    if capped:
        # Killed by us; what was read so far still answers the query.
        logger.debug("%s output capped at %d bytes", probe, probe.max_output)
        stdout = _truncate(stdout, probe.max_output)
        return ProbeSuccess(output=stdout.decode("utf-8", errors="replace"))

    if proc.returncode != 0:
        logger.debug("%s exited %s", probe, proc.returncode)
        return ProbeFailure(reason=f"exit {proc.returncode}")

    return ProbeSuccess(output=stdout.decode("utf-8", errors="replace"))


def find_worktree(cwd: str | Path) -> Path | None:
    """Return the working-copy root containing ``cwd``, or None.

    Looks for a ``.git`` entry (directory, or file for worktrees and
    submodules) without starting a process.
    """
    try:
        p = Path(cwd).expanduser().resolve()
    except OSError:
        return None
    for candidate in (p, *p.parents):
        if (candidate / ".git").exists():
            return candidate
    return None
