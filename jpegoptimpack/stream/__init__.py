"""Duplex stream adapter around the jpegoptim process."""

from jpegoptimpack.stream.adapter import DEFAULT_READ_SIZE, JpegOptimStream
from jpegoptimpack.stream.optimize import DEFAULT_CHUNK_SIZE, optimize_bytes

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_READ_SIZE",
    "JpegOptimStream",
    "optimize_bytes",
]
