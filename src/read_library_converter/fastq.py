"""FASTQ file helpers: compression and (de)interleaving."""

from __future__ import annotations

import gzip
import logging
import shutil
from pathlib import Path
from typing import IO

from read_library_converter.errors import FastqFormatError

logger = logging.getLogger(__name__)

LINES_PER_RECORD = 4


def open_reads(path: Path, gzipped: bool, mode: str = "r") -> IO[str]:
    """Open a reads file in text mode, transparently handling gzip."""
    if gzipped:
        return gzip.open(path, mode + "t", encoding="utf-8")
    return path.open(mode, encoding="utf-8")


def read_record(handle: IO[str], source: str) -> str:
    """Read one four-line FASTQ record, skipping blank lines.

    Returns an empty string at end of file.

    Raises
    ------
    FastqFormatError
        If the file ends part-way through a record.
    """
    lines: list[str] = []
    while len(lines) < LINES_PER_RECORD:
        line = handle.readline()
        if not line:
            if lines:
                raise FastqFormatError(
                    "Reading FASTQ record failed - non-blank lines are not a "
                    f"multiple of four. File: {source}"
                )
            return ""
        if not line.strip():
            continue
        lines.append(line if line.endswith("\n") else line + "\n")
    return "".join(lines)


def interleave(
    fwd_path: Path,
    rev_path: Path,
    target_path: Path,
    *,
    fwd_gzipped: bool = False,
    rev_gzipped: bool = False,
) -> Path:
    """Interleave forward and reverse reads into one uncompressed file.

    Raises
    ------
    FastqFormatError
        If the files hold different numbers of records.
    """
    logger.info("Interleaving %s and %s to %s", fwd_path, rev_path, target_path)
    with (
        open_reads(fwd_path, fwd_gzipped) as fwd,
        open_reads(rev_path, rev_gzipped) as rev,
        target_path.open("w", encoding="utf-8") as target,
    ):
        while True:
            fwd_record = read_record(fwd, str(fwd_path))
            rev_record = read_record(rev, str(rev_path))
            if bool(fwd_record) != bool(rev_record):
                raise FastqFormatError(
                    "Interleave failed - reads files do not have an equal number "
                    f"of records. Forward path {fwd_path}, reverse path {rev_path}"
                )
            if not fwd_record:
                break
            target.write(fwd_record)
            target.write(rev_record)
    return target_path


def deinterleave(
    source_path: Path,
    fwd_path: Path,
    rev_path: Path,
    *,
    gzipped: bool = False,
) -> tuple[Path, Path]:
    """Split an interleaved reads file into uncompressed forward/reverse files.

    Raises
    ------
    FastqFormatError
        If the file does not hold an even number of complete records.
    """
    logger.info("Deinterleaving %s to %s and %s", source_path, fwd_path, rev_path)
    count = 0
    with (
        open_reads(source_path, gzipped) as source,
        fwd_path.open("w", encoding="utf-8") as fwd,
        rev_path.open("w", encoding="utf-8") as rev,
    ):
        for line in source:
            if not line.strip():
                continue
            target = fwd if count % 8 < LINES_PER_RECORD else rev
            target.write(line if line.endswith("\n") else line + "\n")
            count += 1
    if count % 8 != 0:
        raise FastqFormatError(
            "Deinterleave failed - line count is not divisible by 8. "
            f"File: {source_path}"
        )
    return fwd_path, rev_path


def gzip_file(path: Path) -> Path:
    """Compress ``path`` to ``path.gz`` and remove the original."""
    target = path.with_name(path.name + ".gz")
    with path.open("rb") as src, gzip.open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)
    path.unlink()
    return target


def gunzip_file(path: Path) -> Path:
    """Decompress ``path`` (ending in ``.gz``) and remove the original."""
    if path.suffix.lower() != ".gz":
        raise ValueError(f"expected a .gz file: {path}")
    target = path.with_name(path.name[: -len(".gz")])
    with gzip.open(path, "rb") as src, target.open("wb") as dst:
        shutil.copyfileobj(src, dst)
    path.unlink()
    return target


def set_compression(path: Path, gzipped: bool, target_gzipped: bool) -> Path:
    """Compress or decompress ``path`` so it matches ``target_gzipped``."""
    if gzipped == target_gzipped:
        return path
    if target_gzipped:
        logger.info("Compressing %s", path)
        return gzip_file(path)
    logger.info("Decompressing %s", path)
    return gunzip_file(path)
