from __future__ import annotations

import json
from pathlib import Path
import re

from typer.testing import CliRunner

import jpegoptimkit
from jpegoptimpack.binary import BINARY_ENV_VAR, ExecutableResolver
import jpegoptimpack.cli.app as cli_module
from jpegoptimpack.cli.app import app


def test_cli_version_option_reports_semver_like_value() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    reported = result.output.strip()
    assert re.fullmatch(r"\d+\.\d+\.\d+", reported) is not None
    assert reported == jpegoptimkit.__version__


def test_cli_optimize_writes_output_file_and_json_summary(
    tmp_path: Path,
    fake_jpegoptim: Path,
) -> None:
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"\xff\xd8photo\xff\xd9")
    out = tmp_path / "out" / "photo.min.jpg"

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "optimize",
            str(source),
            "--output",
            str(out),
            "--binary",
            str(fake_jpegoptim),
            "--chunk-size",
            "3",
            "--json",
        ],
    )

    assert result.exit_code == 0, result.output
    assert out.read_bytes() == b"JPEGOPTIM:\xff\xd8photo\xff\xd9"
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["input_bytes"] == 9
    assert payload["output_bytes"] == 19


def test_cli_optimize_streams_stdin_to_stdout(fake_jpegoptim: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["optimize", "-", "--binary", str(fake_jpegoptim)],
        input=b"raw-bytes",
    )

    assert result.exit_code == 0, result.output
    assert result.stdout_bytes == b"JPEGOPTIM:raw-bytes"


def test_cli_optimize_passes_extra_arguments(fake_jpegoptim: Path, monkeypatch) -> None:
    monkeypatch.setenv("FAKE_JPEGOPTIM_MODE", "argv")
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["optimize", "-", "--binary", str(fake_jpegoptim), "--arg=--max=40"],
        input=b"img",
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout_bytes)[0] == "--max=40"


def test_cli_optimize_reports_tool_failure(
    tmp_path: Path,
    fake_jpegoptim: Path,
    monkeypatch,
) -> None:
    monkeypatch.setenv("FAKE_JPEGOPTIM_MODE", "fail")
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"img")

    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "optimize",
            str(source),
            "-o",
            str(tmp_path / "out.jpg"),
            "--binary",
            str(fake_jpegoptim),
            "--json",
        ],
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "error"
    assert payload["error_type"] == "NonZeroExitError"
    assert payload["tool_exit_code"] == 3
    assert not (tmp_path / "out.jpg").exists()


def test_cli_optimize_missing_input_fails(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["optimize", str(tmp_path / "missing.jpg")])

    assert result.exit_code == 1
    assert "cannot read" in result.output


def test_cli_optimize_json_requires_output_path() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["optimize", "-", "--json"], input=b"img")

    assert result.exit_code == 2
    assert json.loads(result.stdout.strip())["status"] == "error"


def test_cli_which_reports_pinned_binary(fake_jpegoptim: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["which", "--binary", str(fake_jpegoptim), "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout.strip())["path"] == str(fake_jpegoptim)


def test_cli_which_fails_without_any_binary(monkeypatch) -> None:
    monkeypatch.delenv(BINARY_ENV_VAR, raising=False)
    monkeypatch.setattr(
        cli_module,
        "DEFAULT_RESOLVER",
        ExecutableResolver(which=lambda name: None, bundled=lambda name: None),
    )

    runner = CliRunner()
    result = runner.invoke(app, ["which"])

    assert result.exit_code == 1
    assert "No jpegoptim binary in PATH" in result.output


def test_cli_pretty_json_renders_indented_payload(fake_jpegoptim: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["--pretty-json", "which", "--binary", str(fake_jpegoptim), "--json"],
    )

    assert result.exit_code == 0, result.output
    assert '\n  "path": ' in result.stdout
    assert json.loads(result.stdout)["path"] == str(fake_jpegoptim)


def test_cli_stable_json_is_compact_by_default(fake_jpegoptim: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["which", "--binary", str(fake_jpegoptim), "--json"])

    assert result.exit_code == 0, result.output
    assert result.stdout.strip().count("\n") == 0
    assert '"exit_code":0' in result.stdout
