"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from read_library_converter.application.results import DownloadedBlob
from read_library_converter.types import JsonObject


class WorkspaceReader(Protocol):
    """Fetch reads library objects from the workspace service."""

    def get_objects(self, refs: Sequence[str]) -> list[JsonObject]:
        """Return ``{"info": [...], "data": {...}}`` objects in ``refs`` order."""


class BlobStore(Protocol):
    """Download reads files from the storage backend."""

    def download(self, node_id: str, destination: Path) -> DownloadedBlob:
        """Write node content to ``destination`` and report its filename."""
