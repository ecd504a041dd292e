"""Memoized lookup of the jpegoptim executable shared by every adapter."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
import shutil
import sys
import threading
from typing import Callable, Optional

from jpegoptimpack.core.errors import ResolutionError

logger = logging.getLogger(__name__)

BINARY_NAME = "jpegoptim"
BINARY_ENV_VAR = "JPEGOPTIMKIT_BINARY"

WhichFunc = Callable[[str], Optional[str]]
BundledFunc = Callable[[str], Optional[str]]


def bundled_binary_path(name: str = BINARY_NAME) -> str | None:
    """Return an executable shipped beside the running interpreter, if any."""
    bin_dir = Path(sys.executable).parent
    for candidate in (bin_dir / name, bin_dir / f"{name}.exe"):
        if candidate.is_file() and os.access(candidate, os.X_OK):
            return str(candidate)
    return None


class ExecutableResolver:
    """Resolves the executable path once and caches it for the process lifetime.

    Concurrent ``resolve()`` calls on the same event loop share one in-flight
    lookup. Failed lookups are not cached.
    """

    def __init__(
        self,
        name: str = BINARY_NAME,
        *,
        which: WhichFunc = shutil.which,
        bundled: BundledFunc = bundled_binary_path,
        env_var: str = BINARY_ENV_VAR,
    ) -> None:
        self.name = name
        self.env_var = env_var
        self.lookup_count = 0
        self._which = which
        self._bundled = bundled
        self._override: str | None = None
        self._resolved: str | None = None
        self._inflight: asyncio.Task[str] | None = None
        self._lock = threading.Lock()

    @property
    def override(self) -> str | None:
        with self._lock:
            return self._override

    @property
    def cached_path(self) -> str | None:
        with self._lock:
            return self._resolved

    def set_binary_path(self, path: str | os.PathLike[str] | None) -> None:
        """Pin the executable path, bypassing lookup. ``None`` clears the pin."""
        with self._lock:
            self._override = os.fspath(path) if path is not None else None

    def clear_cache(self) -> None:
        with self._lock:
            self._resolved = None
            self._inflight = None

    async def resolve(self) -> str:
        with self._lock:
            if self._override is not None:
                return self._override
            if self._resolved is not None:
                return self._resolved
            loop = asyncio.get_running_loop()
            inflight = self._inflight
            # A task left over from a closed loop cannot be awaited here.
            if inflight is None or inflight.get_loop() is not loop:
                inflight = loop.create_task(self._lookup())
                self._inflight = inflight
        return await asyncio.shield(inflight)

    async def _lookup(self) -> str:
        task = asyncio.current_task()
        with self._lock:
            self.lookup_count += 1
        try:
            path = await self._find()
        except BaseException:
            with self._lock:
                if self._inflight is task:
                    self._inflight = None
            raise
        with self._lock:
            # clear_cache() during the lookup detaches it; its result is not cached.
            if self._inflight is task:
                self._inflight = None
                self._resolved = path
        logger.debug("resolved %s executable: %s", self.name, path)
        return path

    async def _find(self) -> str:
        configured = os.environ.get(self.env_var, "").strip()
        if configured:
            return configured
        found = await asyncio.to_thread(self._which, self.name)
        if found:
            return found
        bundled = self._bundled(self.name)
        if bundled:
            return bundled
        raise ResolutionError(
            f"No {self.name} binary in PATH and no bundled {self.name} binary "
            f"is available for this platform (set {self.env_var} to override)"
        )


DEFAULT_RESOLVER = ExecutableResolver()


async def get_binary_path() -> str:
    return await DEFAULT_RESOLVER.resolve()


def set_binary_path(path: str | os.PathLike[str] | None) -> None:
    DEFAULT_RESOLVER.set_binary_path(path)


def clear_binary_path_cache() -> None:
    DEFAULT_RESOLVER.clear_cache()
