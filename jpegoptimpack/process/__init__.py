"""Process launching for the external jpegoptim tool."""

from jpegoptimpack.process.asyncio_launcher import AsyncioProcessLauncher
from jpegoptimpack.process.base import (
    ProcessHandle,
    ProcessInput,
    ProcessLauncher,
    ProcessOutput,
)

__all__ = [
    "AsyncioProcessLauncher",
    "ProcessHandle",
    "ProcessInput",
    "ProcessLauncher",
    "ProcessOutput",
]
