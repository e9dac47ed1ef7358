"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from read_library_converter.resolver import ResolvedReadsType


@dataclass(frozen=True)
class DownloadedBlob:
    """Blob store download outcome."""

    path: Path
    filename: str | None = None


@dataclass(frozen=True)
class LocalReadsFile:
    """Reads file staged in the scratch area with its resolved type."""

    path: Path
    gzipped: bool
    name: str | None = None
    resolved: ResolvedReadsType | None = None
