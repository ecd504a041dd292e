"""Core types and errors for JpegOptimPack."""

from jpegoptimpack.core.errors import (
    EmptyOutputError,
    JpegOptimError,
    NonZeroExitError,
    PipeError,
    ProcessError,
    ResolutionError,
    SpawnError,
)
from jpegoptimpack.core.types import (
    ADAPTER_EVENTS,
    DEFAULT_ARGS,
    FIXED_ARGS,
    AdapterEvent,
    LifecycleState,
    build_arguments,
)

__all__ = [
    "ADAPTER_EVENTS",
    "AdapterEvent",
    "DEFAULT_ARGS",
    "EmptyOutputError",
    "FIXED_ARGS",
    "JpegOptimError",
    "LifecycleState",
    "NonZeroExitError",
    "PipeError",
    "ProcessError",
    "ResolutionError",
    "SpawnError",
    "build_arguments",
]
