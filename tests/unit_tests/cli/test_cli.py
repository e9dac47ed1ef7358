"""Unit tests for CLI command behavior."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from read_library_converter.cli import cli as cli_module
from read_library_converter.client.baseclient import ServerError
from read_library_converter.schemas import (
    ConvertReadLibraryOutput,
    ConvertReadLibraryParams,
)

runner = CliRunner()

OUTPUT = ConvertReadLibraryOutput.model_validate(
    {
        "files": {
            "1/2/3": {
                "ref": "1/2/3",
                "files": {
                    "fwd": "/scratch/x.single.fastq.gz",
                    "otype": "single",
                    "type": "single",
                    "gzipped": True,
                },
                "single_genome": True,
            }
        }
    }
)


class _FakeClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.params: list[ConvertReadLibraryParams] = []
        self.closed = False

    def __enter__(self) -> _FakeClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    def convert_read_library_to_file(
        self, params: ConvertReadLibraryParams
    ) -> ConvertReadLibraryOutput:
        self.params.append(params)
        if self.error is not None:
            raise self.error
        return OUTPUT

    def status(self) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        return {"state": "OK", "message": "", "version": "0.1.0"}


def _install_client(
    monkeypatch: pytest.MonkeyPatch, client: _FakeClient
) -> list[tuple[str, str | None, bool]]:
    calls: list[tuple[str, str | None, bool]] = []

    def fake_make_client(url: str, token: str | None, allow_insecure_http: bool) -> _FakeClient:
        calls.append((url, token, allow_insecure_http))
        return client

    monkeypatch.setattr(cli_module, "_make_client", fake_make_client)
    return calls


def test_help_shows_commands() -> None:
    """Ensure top-level help lists the available subcommands."""
    result = runner.invoke(cli_module.app, ["--help"])
    assert result.exit_code == 0
    for command in ("resolve", "convert", "status", "doctor"):
        assert command in result.output


def test_resolve_prints_outcome() -> None:
    """Print format, gzip flag and the deciding source."""
    result = runner.invoke(
        cli_module.app,
        ["resolve", "--filename", "reads.fastq.gz", "--storage-filename", "x.txt"],
    )
    assert result.exit_code == 0
    assert result.output.strip() == "fastq gzipped=true source=filename:reads.fastq.gz"


def test_resolve_type_field_takes_precedence() -> None:
    """Resolve from ``--type`` ahead of any filename."""
    result = runner.invoke(
        cli_module.app, ["resolve", "--type", "fq", "--filename", "reads.txt"]
    )
    assert result.exit_code == 0
    assert result.output.strip() == "fastq gzipped=false source=type:fq"


@pytest.mark.parametrize(
    ("args", "error_name"),
    [
        ([], "MissingSourceError"),
        (["--filename", "reads.txt"], "UnrecognizedSuffixError"),
        (["--filename", "reads.gz"], "MalformedCompressionError"),
    ],
)
def test_resolve_failures_exit_with_error_name(args: list[str], error_name: str) -> None:
    """Exit with code 2 and name the resolver error."""
    result = runner.invoke(cli_module.app, ["resolve", *args])
    assert result.exit_code == 2
    assert error_name in result.output
    assert "Traceback" not in result.output


def test_debug_prints_traceback() -> None:
    """Include the traceback when ``--debug`` is given."""
    result = runner.invoke(cli_module.app, ["--debug", "resolve", "--filename", "reads.txt"])
    assert result.exit_code == 2
    assert "Traceback" in result.output


def test_convert_forwards_params_and_prints_json(monkeypatch: pytest.MonkeyPatch) -> None:
    """Build request params from options and print the service output."""
    client = _FakeClient()
    calls = _install_client(monkeypatch, client)

    result = runner.invoke(
        cli_module.app,
        [
            "convert",
            "reads",
            "1/2/3",
            "--url",
            "https://rltf.test",
            "--token",
            "tok",
            "--workspace-name",
            "myws",
            "--gzip",
            "--no-interleaved",
            "--output-dir",
            "run1",
        ],
    )

    assert result.exit_code == 0, result.output
    assert calls == [("https://rltf.test", "tok", False)]
    assert client.params == [
        ConvertReadLibraryParams(
            read_libraries=["reads", "1/2/3"],
            workspace_name="myws",
            gzip=True,
            interleaved=False,
            output_dir="run1",
        )
    ]
    assert client.closed
    printed = json.loads(result.output)
    assert printed["files"]["1/2/3"]["files"]["gzipped"] is True


def test_convert_reads_url_and_token_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fall back to environment variables for url and token."""
    calls = _install_client(monkeypatch, _FakeClient())
    result = runner.invoke(
        cli_module.app,
        ["convert", "1/2/3"],
        env={"READLIB_SERVICE_URL": "https://env.test", "KB_AUTH_TOKEN": "envtok"},
    )
    assert result.exit_code == 0, result.output
    assert calls == [("https://env.test", "envtok", False)]


def test_convert_reports_server_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Show the remote error name and message on failure."""
    error = ServerError("UnrecognizedSuffixError", -32500, "reads.txt is illegal")
    _install_client(monkeypatch, _FakeClient(error))
    result = runner.invoke(cli_module.app, ["convert", "1/2/3", "--url", "https://rltf.test"])
    assert result.exit_code == 1
    assert "UnrecognizedSuffixError" in result.output
    assert "reads.txt is illegal" in result.output


def test_convert_refuses_token_over_http() -> None:
    """Reject sending a token to a plain http url by default."""
    result = runner.invoke(
        cli_module.app,
        ["convert", "1/2/3", "--url", "http://rltf.test", "--token", "tok"],
    )
    assert result.exit_code == 2
    assert "insecure" in result.output


def test_status_prints_record(monkeypatch: pytest.MonkeyPatch) -> None:
    """Print the remote status record as JSON."""
    calls = _install_client(monkeypatch, _FakeClient())
    result = runner.invoke(
        cli_module.app, ["status", "--url", "http://rltf.test", "--allow-insecure-http"]
    )
    assert result.exit_code == 0, result.output
    assert calls == [("http://rltf.test", None, True)]
    assert json.loads(result.output)["state"] == "OK"


def test_doctor_lists_dependencies() -> None:
    """List Python and dependency versions."""
    result = runner.invoke(cli_module.app, ["doctor"])
    assert result.exit_code == 0
    assert "Python:" in result.output
    assert "pydantic:" in result.output
    assert "httpx:" in result.output
