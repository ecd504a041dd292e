from __future__ import annotations

import asyncio
import os
from pathlib import Path
import sys
from typing import Sequence

import pytest

FAKE_TOOL_SCRIPT = Path(__file__).parent / "fixtures" / "tools" / "fake_jpegoptim.py"


class FakeResolver:
    """Resolver double counting calls; optionally gated or failing."""

    def __init__(self, path: str = "/opt/fake/jpegoptim") -> None:
        self.path = path
        self.calls = 0
        self.error: BaseException | None = None
        self.gate: asyncio.Event | None = None

    async def resolve(self) -> str:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.path


class FakeStdin:
    def __init__(self, log: list[tuple]) -> None:
        self.log = log
        self.drain_error: BaseException | None = None

    def write(self, data: bytes) -> None:
        self.log.append(("write", bytes(data)))

    async def drain(self) -> None:
        if self.drain_error is not None:
            raise self.drain_error

    def close(self) -> None:
        self.log.append(("close",))

    async def wait_closed(self) -> None:
        return None


class FailingStdout(asyncio.StreamReader):
    """Stdout whose every read fails with a fixed error."""

    def __init__(self, error: BaseException) -> None:
        super().__init__()
        self.error = error

    async def read(self, n: int = -1) -> bytes:
        raise self.error


class FakeProcess:
    """In-memory process: tests push stdout bytes and decide the exit code."""

    def __init__(self, pid: int, stdout_error: BaseException | None = None) -> None:
        self.pid = pid
        self.stdin_log: list[tuple] = []
        self.stdin = FakeStdin(self.stdin_log)
        self.stdout = FailingStdout(stdout_error) if stdout_error else asyncio.StreamReader()
        self.killed = False
        self._exit: asyncio.Future[int] = asyncio.get_running_loop().create_future()

    def emit(self, data: bytes) -> None:
        self.stdout.feed_data(data)

    def exit(self, code: int) -> None:
        self.stdout.feed_eof()
        if not self._exit.done():
            self._exit.set_result(code)

    async def wait(self) -> int:
        return await asyncio.shield(self._exit)

    def kill(self) -> None:
        self.killed = True
        self.exit(-9)


class FakeLauncher:
    def __init__(self) -> None:
        self.launches: list[tuple[str, tuple[str, ...]]] = []
        self.processes: list[FakeProcess] = []
        self.error: BaseException | None = None
        self.gate: asyncio.Event | None = None
        self.stdout_error: BaseException | None = None

    async def launch(self, path: str, args: Sequence[str]) -> FakeProcess:
        self.launches.append((path, tuple(args)))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        process = FakeProcess(pid=1000 + len(self.processes), stdout_error=self.stdout_error)
        self.processes.append(process)
        return process


@pytest.fixture()
def fake_resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture()
def fake_launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture()
def fake_jpegoptim(tmp_path: Path) -> Path:
    """Executable wrapper running the fixture tool with this interpreter."""
    if os.name == "nt":
        pytest.skip("shell wrapper fixture requires a POSIX shell")
    wrapper = tmp_path / "bin" / "jpegoptim"
    wrapper.parent.mkdir(parents=True, exist_ok=True)
    wrapper.write_text(
        f'#!/bin/sh\nexec "{sys.executable}" "{FAKE_TOOL_SCRIPT}" "$@"\n',
        encoding="utf-8",
    )
    wrapper.chmod(0o755)
    return wrapper
