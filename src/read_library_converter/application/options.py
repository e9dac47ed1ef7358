"""Typed option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class OutputOptions:
    """Requested output layout and compression.

    ``None`` leaves the corresponding property of the source files as is.
    """

    gzip: bool | None = None
    interleaved: bool | None = None


@dataclass(frozen=True)
class ConversionOptions:
    """Shared conversion options passed through use-cases."""

    scratch_dir: Path
    output: OutputOptions = OutputOptions()
    output_dir: str | None = None
