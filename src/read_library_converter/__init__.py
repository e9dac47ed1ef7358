"""Top-level API for converting workspace reads libraries to FASTQ files."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from read_library_converter.config import ServiceConfig
    from read_library_converter.resolver import ResolvedReadsType
    from read_library_converter.schemas import (
        ConvertReadLibraryOutput,
        ConvertReadLibraryParams,
    )

__version__ = "0.1.0"


def resolve_reads_file_type(
    *,
    type_field: str | None = None,
    declared_filename: str | None = None,
    storage_filename: str | None = None,
    identifier: str = "<unknown>",
) -> ResolvedReadsType:
    """Resolve the format and gzip flag of a reads file.

    Parameters
    ----------
    type_field : str | None
        Explicit library ``type`` field; highest precedence.
    declared_filename : str | None
        Filename from the library's file or handle record.
    storage_filename : str | None
        Filename reported by the blob store; lowest precedence.
    identifier : str
        Reference included in error messages.

    Returns
    -------
    ResolvedReadsType
        FASTQ format plus ``gzipped`` flag and the deciding source.
    """
    from read_library_converter.resolver import resolve_reads_file_type as _impl

    return _impl(
        type_field=type_field,
        declared_filename=declared_filename,
        storage_filename=storage_filename,
        identifier=identifier,
    )


def convert_read_library_to_file(
    params: ConvertReadLibraryParams | Mapping[str, object],
    *,
    token: str | None = None,
    config: ServiceConfig | None = None,
    scratch_dir: Path | None = None,
) -> ConvertReadLibraryOutput:
    """Convert read libraries to local FASTQ files.

    Parameters
    ----------
    params : ConvertReadLibraryParams | Mapping
        Library references and output options.
    token : str | None, default=None
        Token used against the workspace and Shock services.
    config : ServiceConfig | None, default=None
        Service endpoints; read from ``READLIB_*`` variables when omitted.
    scratch_dir : Path | None, default=None
        Directory receiving the produced files.
    """
    from read_library_converter.api import convert_read_library_to_file as _impl

    return _impl(params, token=token, config=config, scratch_dir=scratch_dir)


__all__ = [
    "__version__",
    "convert_read_library_to_file",
    "resolve_reads_file_type",
]
