"""One-shot helpers built on the duplex adapter."""

from __future__ import annotations

from typing import Iterable

from jpegoptimpack.binary import ExecutableResolver
from jpegoptimpack.process import ProcessLauncher
from jpegoptimpack.stream.adapter import JpegOptimStream

DEFAULT_CHUNK_SIZE = 64 * 1024


async def optimize_bytes(
    data: bytes,
    args: Iterable[str] | None = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    resolver: ExecutableResolver | None = None,
    launcher: ProcessLauncher | None = None,
) -> bytes:
    """Pipe ``data`` through jpegoptim and return everything it wrote.

    Raises the adapter's terminal error on failure.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    adapter = JpegOptimStream(args, resolver=resolver, launcher=launcher)
    output = bytearray()
    adapter.on("data", output.extend)

    view = memoryview(data)
    for offset in range(0, len(view), chunk_size):
        adapter.write(view[offset : offset + chunk_size])
    adapter.end()
    try:
        await adapter.wait_closed()
    finally:
        adapter.destroy()
    return bytes(output)
