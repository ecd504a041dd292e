"""Error taxonomy shared by the resolver, launcher and stream adapter."""

from __future__ import annotations


class JpegOptimError(Exception):
    """Base class for jpegoptim adapter errors."""


class ResolutionError(JpegOptimError):
    """Raised when no jpegoptim executable is found by any strategy."""


class ProcessError(JpegOptimError):
    """Base class for failures of the spawned jpegoptim process."""


class SpawnError(ProcessError):
    """Raised when the external process fails to start."""


class PipeError(ProcessError):
    """Raised when the process input or output pipe reports an I/O error."""


class NonZeroExitError(ProcessError):
    """Raised when the process exits with a failure code."""

    def __init__(self, exit_code: int) -> None:
        super().__init__(
            f"The jpegoptim process exited with a non-zero exit code: {exit_code}"
        )
        self.exit_code = exit_code


class EmptyOutputError(ProcessError):
    """Raised when the process exits cleanly without writing any output."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "JpegOptim: The stdout stream ended without emitting any data")
