"""Exception hierarchy for reads-library conversion."""

from __future__ import annotations


class ConversionError(Exception):
    """Base error for failed read library conversions."""

    exit_code = 1


class ReadsFileTypeError(ConversionError):
    """A reads file's type could not be resolved to FASTQ.

    Parameters
    ----------
    identifier : str
        Library reference or storage node the file belongs to.
    filename : str | None
        Offending filename or type tag, ``None`` when nothing was available.
    reason : str
        Human-readable description of the violated rule.
    """

    exit_code = 2

    def __init__(self, identifier: str, filename: str | None, reason: str) -> None:
        self.identifier = identifier
        self.filename = filename
        self.reason = reason
        if filename is None:
            message = f"{reason}. Reads file: {identifier}"
        else:
            message = f"{filename} is illegal: {reason}. Reads file: {identifier}"
        super().__init__(message)


class MissingSourceError(ReadsFileTypeError):
    """No type field, declared filename, or storage filename was available."""


class UnrecognizedSuffixError(ReadsFileTypeError):
    """The resolved suffix is neither ``.fq`` nor ``.fastq``."""


class MalformedCompressionError(ReadsFileTypeError):
    """A ``.gz`` suffix is present without a FASTQ suffix beneath it."""


class UnsupportedLibraryTypeError(ConversionError):
    """Workspace object is not a supported reads library type."""


class FastqFormatError(ConversionError):
    """FASTQ records could not be split or paired."""


class StorageError(ConversionError):
    """Workspace or blob store request failed."""
