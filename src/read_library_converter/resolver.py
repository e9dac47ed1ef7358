"""Reads file type resolution from workspace and storage metadata."""

from __future__ import annotations

from dataclasses import dataclass

from read_library_converter.errors import (
    MalformedCompressionError,
    MissingSourceError,
    UnrecognizedSuffixError,
)
from read_library_converter.types import ReadsFormat, SourceField

FASTQ_SUFFIXES = (".fq", ".fastq")
GZIP_SUFFIX = ".gz"


@dataclass(frozen=True)
class ResolvedReadsType:
    """Outcome of reads file type resolution.

    Parameters
    ----------
    file_format : {"fastq"}
        Base format of the reads file.
    gzipped : bool
        Whether the file carries a ``.gz`` suffix.
    source : str
        Value that decided the type, as it appeared in the metadata.
    source_field : {"type", "filename", "storage_filename"}
        Which precedence level supplied ``source``.
    """

    file_format: ReadsFormat
    gzipped: bool
    source: str
    source_field: SourceField

    @property
    def extension(self) -> str:
        """Canonical file extension for the resolved type."""
        return ".fastq.gz" if self.gzipped else ".fastq"


def normalize_type_tag(value: str | None) -> str | None:
    """Turn a library ``type`` field such as ``fq.gz`` into a suffix."""
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    if not cleaned.startswith("."):
        cleaned = "." + cleaned
    return cleaned


def _first_present(
    candidates: tuple[tuple[SourceField, str | None], ...],
) -> tuple[SourceField, str] | None:
    for field, value in candidates:
        if value is not None and value.strip():
            return field, value
    return None


def resolve_reads_file_type(
    *,
    type_field: str | None = None,
    declared_filename: str | None = None,
    storage_filename: str | None = None,
    identifier: str = "<unknown>",
) -> ResolvedReadsType:
    """Resolve the format and compression of one reads file.

    The first present value out of ``type_field``, ``declared_filename`` and
    ``storage_filename`` decides; the others are ignored.

    Parameters
    ----------
    type_field : str | None
        Explicit ``type`` field of a KBaseFile library, e.g. ``fastq.gz``.
    declared_filename : str | None
        ``file_name`` from the library's file or handle record.
    storage_filename : str | None
        Filename reported by the blob store.
    identifier : str
        Reference included in error messages.

    Returns
    -------
    ResolvedReadsType
        Resolved format and gzip flag.

    Raises
    ------
    MissingSourceError
        If no value is present anywhere in the chain.
    MalformedCompressionError
        If a ``.gz`` suffix has no FASTQ suffix beneath it.
    UnrecognizedSuffixError
        If the suffix is not ``.fq`` or ``.fastq``.
    """
    found = _first_present(
        (
            ("type", normalize_type_tag(type_field)),
            ("filename", declared_filename),
            ("storage_filename", storage_filename),
        )
    )
    if found is None:
        raise MissingSourceError(
            identifier,
            None,
            "Unable to determine file type from the library type field, "
            "declared filename, or storage filename",
        )
    source_field, source = found
    if source_field == "type":
        # Report the tag as the caller supplied it.
        shown = (type_field or "").strip()
    else:
        shown = source

    remainder = source.strip().lower()
    gzipped = remainder.endswith(GZIP_SUFFIX)
    if gzipped:
        remainder = remainder[: -len(GZIP_SUFFIX)]

    if not remainder.endswith(FASTQ_SUFFIXES):
        if gzipped:
            raise MalformedCompressionError(
                identifier,
                shown,
                "a .gz suffix must follow a .fq or .fastq suffix",
            )
        raise UnrecognizedSuffixError(
            identifier,
            shown,
            "expected a FASTQ file with a .fq or .fastq suffix",
        )
    return ResolvedReadsType(
        file_format="fastq",
        gzipped=gzipped,
        source=shown,
        source_field=source_field,
    )
