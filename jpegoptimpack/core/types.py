"""Type definitions and argument rules for the jpegoptim adapter."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Literal

AdapterEvent = Literal["data", "end", "error"]

ADAPTER_EVENTS: tuple[str, ...] = ("data", "end", "error")

DEFAULT_ARGS: tuple[str, ...] = ("--max=85",)

FIXED_ARGS: tuple[str, ...] = (
    "--stdout",
    "--strip-all",
    "--all-progressive",
    "--quiet",
)


class LifecycleState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    RUNNING = "running"
    TERMINATED = "terminated"


def build_arguments(args: Iterable[str] | None = None) -> tuple[str, ...]:
    """Return caller arguments (or the defaults) followed by the fixed flags.

    The fixed flags are appended unconditionally, even when the caller already
    passed one of them.
    """
    caller_args = tuple(str(arg) for arg in args) if args is not None else ()
    if not caller_args:
        caller_args = DEFAULT_ARGS
    return caller_args + FIXED_ARGS
