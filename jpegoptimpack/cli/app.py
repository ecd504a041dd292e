import asyncio
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version as package_version
import json
from pathlib import Path
from typing import Any

import typer

from jpegoptimpack.binary import DEFAULT_RESOLVER, ExecutableResolver
from jpegoptimpack.core import JpegOptimError, NonZeroExitError
from jpegoptimpack.stream import DEFAULT_CHUNK_SIZE, optimize_bytes

app = typer.Typer(help="JpegOptimKit CLI")


@dataclass(slots=True)
class _OutputOptions:
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()
_STDIO_TOKEN = "-"


def _resolve_cli_version() -> str:
    try:
        return package_version("jpegoptimkit")
    except PackageNotFoundError:
        from jpegoptimkit import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show JpegOptimKit version and exit.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.stable_json = stable_json


def _echo_json(payload: dict[str, Any]) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    else:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            indent=2,
        )
    typer.echo(rendered)


def _build_resolver(binary: Path | None) -> ExecutableResolver:
    if binary is None:
        return DEFAULT_RESOLVER
    resolver = ExecutableResolver()
    resolver.set_binary_path(binary)
    return resolver


def _read_input(source: str) -> bytes:
    if source == _STDIO_TOKEN:
        return typer.get_binary_stream("stdin").read()
    return Path(source).read_bytes()


def _write_output(destination: Path | None, data: bytes) -> None:
    if destination is None:
        stream = typer.get_binary_stream("stdout")
        stream.write(data)
        stream.flush()
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)


def _fail(message: str, *, json_output: bool, extra: dict[str, Any] | None = None) -> None:
    if json_output:
        _echo_json({"status": "error", "exit_code": 1, "message": message, **(extra or {})})
    else:
        typer.echo(message, err=True)


@app.command()
def optimize(
    source: str = typer.Argument(..., help="Input JPEG path, or '-' for stdin."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write optimized bytes here instead of stdout.",
    ),
    tool_args: list[str] = typer.Option(
        [],
        "--arg",
        help="Extra jpegoptim argument (repeatable); replaces the default --max=85.",
    ),
    binary: Path | None = typer.Option(
        None,
        "--binary",
        help="Use this jpegoptim executable instead of looking one up.",
    ),
    chunk_size: int = typer.Option(
        DEFAULT_CHUNK_SIZE,
        "--chunk-size",
        min=1,
        help="Bytes per write when feeding jpegoptim.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit a machine-readable summary (requires --output).",
    ),
) -> None:
    """Pipe a JPEG through jpegoptim."""
    if json_output and output is None:
        _fail("optimize failed: --json requires --output", json_output=True)
        raise typer.Exit(code=2)

    try:
        data = _read_input(source)
    except OSError as error:
        _fail(f"optimize failed: cannot read {source}: {error}", json_output=json_output)
        raise typer.Exit(code=1) from error

    try:
        optimized = asyncio.run(
            optimize_bytes(
                data,
                tool_args or None,
                chunk_size=chunk_size,
                resolver=_build_resolver(binary),
            )
        )
    except JpegOptimError as error:
        extra: dict[str, Any] = {"error_type": error.__class__.__name__}
        if isinstance(error, NonZeroExitError):
            extra["tool_exit_code"] = error.exit_code
        _fail(f"optimize failed: {error}", json_output=json_output, extra=extra)
        raise typer.Exit(code=1) from error

    _write_output(output, optimized)
    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "source": source,
                "output_path": str(output),
                "input_bytes": len(data),
                "output_bytes": len(optimized),
            }
        )


@app.command()
def which(
    binary: Path | None = typer.Option(
        None,
        "--binary",
        help="Report this executable instead of looking one up.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable output.",
    ),
) -> None:
    """Print the jpegoptim executable the adapter would spawn."""
    resolver = _build_resolver(binary)
    try:
        path = asyncio.run(resolver.resolve())
    except JpegOptimError as error:
        _fail(f"which failed: {error}", json_output=json_output)
        raise typer.Exit(code=1) from error

    if json_output:
        _echo_json({"status": "ok", "exit_code": 0, "path": path})
    else:
        typer.echo(path)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
