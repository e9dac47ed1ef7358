#!/usr/bin/env python3
"""
read_library_converter.cli.cli

Typer-based CLI for resolving reads file types and calling a conversion
service.

Examples
--------
Check how a reads file would be classified:

    read-library-to-file resolve --filename reads.fastq.gz

Convert libraries on a remote service:

    read-library-to-file convert 1234/5/1 --url https://host/services/rltf \\
        --token "$KB_AUTH_TOKEN" --gzip
"""

from __future__ import annotations

import json
import sys
import traceback
from typing import TYPE_CHECKING

import typer

from read_library_converter.errors import ConversionError

if TYPE_CHECKING:
    from read_library_converter.client.client import ReadLibraryToFileClient

app = typer.Typer(
    name="read-library-to-file",
    help="Convert workspace reads libraries to FASTQ files.",
    no_args_is_help=True,
)

URL_HELP = "Conversion service JSON-RPC endpoint."
TOKEN_HELP = "Authorization token (defaults to $KB_AUTH_TOKEN)."
INSECURE_HELP = "Allow sending the token over plain http."


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error and return the process exit code.

    Parameters
    ----------
    exc : Exception
        Exception raised by the command.
    debug : bool
        Whether to include traceback details.
    """
    name = getattr(exc, "name", None) or type(exc).__name__
    message = getattr(exc, "message", None) or str(exc)
    typer.echo(f"[red]✗ {name}:[/red] {message}", err=True)
    if debug:
        typer.echo("\n[dim]Traceback:[/dim]", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _make_client(
    url: str, token: str | None, allow_insecure_http: bool
) -> ReadLibraryToFileClient:
    from read_library_converter.client.client import ReadLibraryToFileClient

    try:
        return ReadLibraryToFileClient(
            url, token, allow_insecure_http=allow_insecure_http
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
) -> None:
    """Initialize shared CLI state."""
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("resolve")
def resolve_cmd(
    ctx: typer.Context,
    type_field: str | None = typer.Option(
        None, "--type", help="Library type field, e.g. fastq.gz (highest precedence)."
    ),
    filename: str | None = typer.Option(
        None, "--filename", help="Declared file or handle filename."
    ),
    storage_filename: str | None = typer.Option(
        None, "--storage-filename", help="Filename reported by the blob store."
    ),
) -> None:
    """Resolve the format and compression of a reads file."""
    debug: bool = bool(ctx.obj.get("debug", False))
    from read_library_converter.resolver import resolve_reads_file_type

    try:
        resolved = resolve_reads_file_type(
            type_field=type_field,
            declared_filename=filename,
            storage_filename=storage_filename,
            identifier="command line",
        )
    except ConversionError as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    typer.echo(
        f"{resolved.file_format} gzipped={str(resolved.gzipped).lower()} "
        f"source={resolved.source_field}:{resolved.source}"
    )


@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    read_libraries: list[str] = typer.Argument(
        ..., help="Workspace references of the reads libraries."
    ),
    url: str = typer.Option(..., "--url", envvar="READLIB_SERVICE_URL", help=URL_HELP),
    token: str | None = typer.Option(
        None, "--token", envvar="KB_AUTH_TOKEN", help=TOKEN_HELP
    ),
    workspace_name: str | None = typer.Option(
        None, "--workspace-name", help="Workspace for non-absolute references."
    ),
    gzip: bool | None = typer.Option(
        None, "--gzip/--no-gzip", help="Force gzipped or plain output files."
    ),
    interleaved: bool | None = typer.Option(
        None,
        "--interleaved/--no-interleaved",
        help="Interleave paired files or split interleaved files.",
    ),
    output_dir: str | None = typer.Option(
        None, "--output-dir", help="Output directory name on the service."
    ),
    allow_insecure_http: bool = typer.Option(
        False, "--allow-insecure-http", help=INSECURE_HELP
    ),
) -> None:
    """Convert read libraries to files on a remote service."""
    debug: bool = bool(ctx.obj.get("debug", False))
    from read_library_converter.schemas import ConvertReadLibraryParams

    try:
        params = ConvertReadLibraryParams(
            read_libraries=read_libraries,
            workspace_name=workspace_name,
            gzip=gzip,
            interleaved=interleaved,
            output_dir=output_dir,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    client = _make_client(url, token, allow_insecure_http)
    try:
        with client:
            output = client.convert_read_library_to_file(params)
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    typer.echo(json.dumps(output.model_dump(mode="json"), indent=2, sort_keys=True))


@app.command("status")
def status_cmd(
    ctx: typer.Context,
    url: str = typer.Option(..., "--url", envvar="READLIB_SERVICE_URL", help=URL_HELP),
    allow_insecure_http: bool = typer.Option(
        False, "--allow-insecure-http", help=INSECURE_HELP
    ),
) -> None:
    """Print the status record of a remote service."""
    debug: bool = bool(ctx.obj.get("debug", False))
    client = _make_client(url, None, allow_insecure_http)
    try:
        with client:
            status = client.status()
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    typer.echo(json.dumps(status, indent=2, sort_keys=True))


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed dependency versions."""
    import importlib.metadata as metadata

    modules = ["pydantic", "httpx", "typer", "fastapi", "uvicorn"]
    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in modules:
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")


if __name__ == "__main__":
    app()
