"""Shared pytest configuration, marker assignment and storage fakes."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from read_library_converter.application.results import DownloadedBlob
from read_library_converter.types import JsonObject


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        parts = set(Path(str(item.fspath)).parts)
        if "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


class FakeWorkspace:
    """In-memory ``WorkspaceReader`` keyed by reference."""

    def __init__(self) -> None:
        self.objects: dict[str, JsonObject] = {}
        self.calls: list[list[str]] = []

    def add(
        self,
        ref: str,
        type_string: str,
        data: dict[str, object],
        *,
        name: str = "reads",
        wsid: int = 1,
        objid: int = 2,
        version: int = 3,
    ) -> str:
        self.objects[ref] = {
            "info": [
                objid,
                name,
                type_string,
                "2016-01-01T00:00:00+0000",
                version,
                "someuser",
                wsid,
                "someworkspace",
                "checksum",
                100,
                {},
            ],
            "data": data,
        }
        return f"{wsid}/{objid}/{version}"

    def get_objects(self, refs: Sequence[str]) -> list[JsonObject]:
        self.calls.append(list(refs))
        return [self.objects[ref] for ref in refs]


class FakeBlobStore:
    """In-memory ``BlobStore`` holding node content and filenames."""

    def __init__(self) -> None:
        self.nodes: dict[str, tuple[bytes, str | None]] = {}
        self.downloads: list[str] = []

    def add(self, node_id: str, content: bytes, filename: str | None = None) -> str:
        self.nodes[node_id] = (content, filename)
        return node_id

    def download(self, node_id: str, destination: Path) -> DownloadedBlob:
        self.downloads.append(node_id)
        content, filename = self.nodes[node_id]
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(content)
        return DownloadedBlob(path=destination, filename=filename)


@pytest.fixture
def workspace() -> FakeWorkspace:
    """Empty fake workspace."""
    return FakeWorkspace()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    """Empty fake blob store."""
    return FakeBlobStore()


@pytest.fixture
def fastq_text() -> Callable[[str, int], str]:
    """Build ``count`` four-line FASTQ records named ``<prefix><n>``."""

    def _make(prefix: str, count: int) -> str:
        return "".join(f"@{prefix}{n}\nACGT\n+\nIIII\n" for n in range(count))

    return _make
