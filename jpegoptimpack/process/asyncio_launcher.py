"""Process launcher backed by asyncio subprocess pipes."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from jpegoptimpack.core.errors import SpawnError
from jpegoptimpack.process.base import ProcessHandle, ProcessLauncher

logger = logging.getLogger(__name__)


class AsyncioProcessLauncher(ProcessLauncher):
    """Spawns the tool with piped stdin/stdout; jpegoptim chatter on stderr is discarded."""

    def __init__(self, *, env: dict[str, str] | None = None) -> None:
        self.env = env

    async def launch(self, path: str, args: Sequence[str]) -> ProcessHandle:
        try:
            process = await asyncio.create_subprocess_exec(
                path,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                env=self.env,
            )
        except OSError as error:
            raise SpawnError(f"Failed to start {path}: {error}") from error
        logger.debug("spawned %s pid=%s args=%s", path, process.pid, list(args))
        return process
