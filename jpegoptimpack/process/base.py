"""Process launcher contracts and shared types."""

from __future__ import annotations

from typing import Protocol, Sequence


class ProcessInput(Protocol):
    """Byte sink wired to the child's stdin."""

    def write(self, data: bytes) -> None:
        """Queue bytes for the child without blocking."""

    async def drain(self) -> None:
        """Wait until queued bytes are flushed; raises on pipe errors."""

    def close(self) -> None:
        """Signal end of input to the child."""

    async def wait_closed(self) -> None:
        """Wait for the sink to finish closing."""


class ProcessOutput(Protocol):
    """Byte source wired to the child's stdout."""

    async def read(self, n: int = -1) -> bytes:
        """Return up to ``n`` bytes, or ``b""`` at end of stream."""


class ProcessHandle(Protocol):
    """Running external process with its two pipe endpoints."""

    pid: int
    stdin: ProcessInput
    stdout: ProcessOutput

    async def wait(self) -> int:
        """Wait for exit and return the exit code."""

    def kill(self) -> None:
        """Forcibly terminate the process."""


class ProcessLauncher(Protocol):
    """Spawns the external tool for one adapter."""

    async def launch(self, path: str, args: Sequence[str]) -> ProcessHandle:
        """Start ``path`` with ``args``; raise ``SpawnError`` on failure."""
