"""Public in-process conversion API (delegates to application use-cases)."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from read_library_converter.adapters.blobstore import ShockBlobStore
from read_library_converter.adapters.workspace import WorkspaceRpcReader
from read_library_converter.application.use_cases import convert_read_libraries
from read_library_converter.client.baseclient import JsonRpcCaller
from read_library_converter.config import ServiceConfig
from read_library_converter.schemas import (
    ConvertReadLibraryOutput,
    ConvertReadLibraryParams,
)


def convert_read_library_to_file(
    params: ConvertReadLibraryParams | Mapping[str, object],
    *,
    token: Optional[str] = None,
    config: Optional[ServiceConfig] = None,
    scratch_dir: Optional[Path] = None,
) -> ConvertReadLibraryOutput:
    """Convert read libraries to files against live workspace and Shock services."""
    config = config or ServiceConfig.from_env()
    caller = JsonRpcCaller(
        config.workspace_url,
        token=token,
        timeout=config.rpc_timeout,
        allow_insecure_http=True,
    )
    blob_store = ShockBlobStore(config.shock_url, token, timeout=config.rpc_timeout)
    try:
        return convert_read_libraries(
            params,
            workspace=WorkspaceRpcReader(caller),
            blob_store=blob_store,
            scratch_dir=scratch_dir or config.scratch_dir,
        )
    finally:
        blob_store.close()
        caller.close()
