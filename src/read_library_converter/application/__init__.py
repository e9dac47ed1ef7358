"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from read_library_converter.application.options import (
    ConversionOptions,
    OutputOptions,
)
from read_library_converter.application.ports import BlobStore, WorkspaceReader
from read_library_converter.application.results import DownloadedBlob, LocalReadsFile
from read_library_converter.schemas import (
    ConvertReadLibraryOutput,
    ConvertReadLibraryParams,
)


def convert_read_libraries(
    params: ConvertReadLibraryParams | Mapping[str, object],
    *,
    workspace: WorkspaceReader,
    blob_store: BlobStore,
    scratch_dir: Path,
) -> ConvertReadLibraryOutput:
    """Convert read libraries to files via lazy use-case import."""
    from read_library_converter.application.use_cases import (
        convert_read_libraries as _impl,
    )

    return _impl(
        params,
        workspace=workspace,
        blob_store=blob_store,
        scratch_dir=scratch_dir,
    )


__all__ = [
    "BlobStore",
    "ConversionOptions",
    "DownloadedBlob",
    "LocalReadsFile",
    "OutputOptions",
    "WorkspaceReader",
    "convert_read_libraries",
]
