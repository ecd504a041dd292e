"""Executable lookup for the jpegoptim tool."""

from jpegoptimpack.binary.resolver import (
    BINARY_ENV_VAR,
    BINARY_NAME,
    DEFAULT_RESOLVER,
    ExecutableResolver,
    bundled_binary_path,
    clear_binary_path_cache,
    get_binary_path,
    set_binary_path,
)

__all__ = [
    "BINARY_ENV_VAR",
    "BINARY_NAME",
    "DEFAULT_RESOLVER",
    "ExecutableResolver",
    "bundled_binary_path",
    "clear_binary_path_cache",
    "get_binary_path",
    "set_binary_path",
]
