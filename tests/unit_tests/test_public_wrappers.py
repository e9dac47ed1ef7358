"""Unit tests for top-level public wrapper functions."""

from __future__ import annotations

from pathlib import Path

import pytest

import read_library_converter as pkg
from read_library_converter import api as api_module
from read_library_converter.adapters.blobstore import ShockBlobStore
from read_library_converter.adapters.workspace import WorkspaceRpcReader
from read_library_converter.config import ServiceConfig
from read_library_converter.errors import UnrecognizedSuffixError
from read_library_converter.schemas import ConvertReadLibraryOutput


def test_version_is_exposed() -> None:
    """Expose the package version."""
    assert pkg.__version__


def test_resolve_wrapper_delegates() -> None:
    """Resolve through the package-level wrapper."""
    resolved = pkg.resolve_reads_file_type(storage_filename="node.FQ.gz")
    assert resolved.gzipped is True
    assert resolved.source_field == "storage_filename"
    with pytest.raises(UnrecognizedSuffixError):
        pkg.resolve_reads_file_type(declared_filename="reads.bam")


def test_convert_wrapper_builds_live_adapters(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Wire workspace and Shock adapters from config and close them afterwards."""
    seen: dict[str, object] = {}

    def fake_convert(params, *, workspace, blob_store, scratch_dir):
        seen.update(
            params=params, workspace=workspace, blob_store=blob_store, scratch_dir=scratch_dir
        )
        return ConvertReadLibraryOutput(files={})

    monkeypatch.setattr(api_module, "convert_read_libraries", fake_convert)
    config = ServiceConfig(
        workspace_url="https://ws.test", shock_url="https://shock.test", scratch_dir=tmp_path
    )

    output = pkg.convert_read_library_to_file(
        {"read_libraries": ["1/2/3"]}, token="tok", config=config
    )

    assert output.files == {}
    assert seen["params"] == {"read_libraries": ["1/2/3"]}
    assert seen["scratch_dir"] == tmp_path
    workspace = seen["workspace"]
    blob_store = seen["blob_store"]
    assert isinstance(workspace, WorkspaceRpcReader)
    assert isinstance(blob_store, ShockBlobStore)
    assert blob_store.url == "https://shock.test"


def test_convert_wrapper_scratch_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Prefer an explicit scratch directory over the configured one."""
    seen: list[Path] = []

    def fake_convert(params, *, workspace, blob_store, scratch_dir):
        del params, workspace, blob_store
        seen.append(scratch_dir)
        return ConvertReadLibraryOutput(files={})

    monkeypatch.setattr(api_module, "convert_read_libraries", fake_convert)
    override = tmp_path / "override"
    api_module.convert_read_library_to_file(
        {"read_libraries": ["1/2/3"]},
        config=ServiceConfig(scratch_dir=tmp_path),
        scratch_dir=override,
    )
    assert seen == [override]
