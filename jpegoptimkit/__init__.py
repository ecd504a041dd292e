"""Stable public API surface for JpegOptimKit.

This module is the supported import path for library users.
"""

from __future__ import annotations

from jpegoptimpack.binary import (
    BINARY_ENV_VAR,
    ExecutableResolver,
    clear_binary_path_cache,
    get_binary_path,
    set_binary_path,
)
from jpegoptimpack.core import (
    DEFAULT_ARGS,
    FIXED_ARGS,
    EmptyOutputError,
    JpegOptimError,
    LifecycleState,
    NonZeroExitError,
    PipeError,
    ProcessError,
    ResolutionError,
    SpawnError,
    build_arguments,
)
from jpegoptimpack.process import AsyncioProcessLauncher, ProcessLauncher
from jpegoptimpack.stream import JpegOptimStream, optimize_bytes

__version__ = "0.1.0"

JpegOptim = JpegOptimStream

__all__ = [
    "AsyncioProcessLauncher",
    "BINARY_ENV_VAR",
    "DEFAULT_ARGS",
    "EmptyOutputError",
    "ExecutableResolver",
    "FIXED_ARGS",
    "JpegOptim",
    "JpegOptimError",
    "JpegOptimStream",
    "LifecycleState",
    "NonZeroExitError",
    "PipeError",
    "ProcessError",
    "ProcessLauncher",
    "ResolutionError",
    "SpawnError",
    "__version__",
    "build_arguments",
    "clear_binary_path_cache",
    "get_binary_path",
    "optimize_bytes",
    "set_binary_path",
]
