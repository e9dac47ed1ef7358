"""Application use-cases orchestrating read library conversion."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from read_library_converter import fastq
from read_library_converter.application.options import (
    ConversionOptions,
    OutputOptions,
)
from read_library_converter.application.ports import BlobStore, WorkspaceReader
from read_library_converter.application.results import LocalReadsFile
from read_library_converter.errors import (
    ConversionError,
    StorageError,
    UnsupportedLibraryTypeError,
)
from read_library_converter.resolver import resolve_reads_file_type
from read_library_converter.schemas import (
    ConvertedReadLibrary,
    ConvertReadLibraryOutput,
    ConvertReadLibraryParams,
    Handle,
    ReadsFiles,
    ReadsObjectData,
    WorkspaceObject,
)
from read_library_converter.types import FileRole, LibraryLayout

logger = logging.getLogger(__name__)

KBASE_FILE = "KBaseFile"
KBASE_ASSEMBLY = "KBaseAssembly"
SINGLE_END_TYPE = "SingleEndLibrary"
PAIRED_END_TYPE = "PairedEndLibrary"
MODULE_NAMES = (KBASE_FILE, KBASE_ASSEMBLY)
TYPE_NAMES = (SINGLE_END_TYPE, PAIRED_END_TYPE)


@dataclass(frozen=True)
class ReadsFileSource:
    """One reads file referenced by a library object."""

    role: FileRole
    handle: Handle
    type_field: str | None = None


@dataclass(frozen=True)
class LibraryFiles:
    """Files and original layout of one reads library."""

    layout: LibraryLayout
    sources: tuple[ReadsFileSource, ...]


def split_type_string(type_string: str) -> tuple[str, str]:
    """Split ``KBaseFile.PairedEndLibrary-2.0`` into module and type names."""
    unversioned = type_string.split("-", 1)[0]
    module_name, _, type_name = unversioned.partition(".")
    return module_name, type_name


def check_library_type(obj: WorkspaceObject) -> tuple[bool, bool]:
    """Return ``(single_end, kbase_file)`` for a supported reads object.

    Raises
    ------
    UnsupportedLibraryTypeError
        If the object is not a KBaseFile/KBaseAssembly reads library.
    """
    module_name, type_name = split_type_string(obj.type_string)
    if module_name not in MODULE_NAMES or type_name not in TYPE_NAMES:
        supported = " ".join(
            f"{module}.{type_}" for module in MODULE_NAMES for type_ in TYPE_NAMES
        )
        raise UnsupportedLibraryTypeError(
            f"Invalid type for object {obj.absolute_ref} ({obj.name}). "
            f"Supported types: {supported}"
        )
    return type_name == SINGLE_END_TYPE, module_name == KBASE_FILE


def _require[T](value: T | None, field: str, obj: WorkspaceObject) -> T:
    if value is None:
        raise UnsupportedLibraryTypeError(
            f"Reads object {obj.absolute_ref} ({obj.name}) is missing {field}"
        )
    return value


def library_layout(obj: WorkspaceObject) -> LibraryFiles:
    """Determine the reads files and original layout of a library object."""
    single, kbase_file = check_library_type(obj)
    data: ReadsObjectData = obj.data
    if kbase_file:
        if single:
            lib = _require(data.lib, "lib", obj)
            return LibraryFiles(
                "single", (ReadsFileSource("single", lib.file, lib.type),)
            )
        lib1 = _require(data.lib1, "lib1", obj)
        if data.lib2 is None:
            return LibraryFiles(
                "interleaved", (ReadsFileSource("inter", lib1.file, lib1.type),)
            )
        return LibraryFiles(
            "paired",
            (
                ReadsFileSource("fwd", lib1.file, lib1.type),
                ReadsFileSource("rev", data.lib2.file, data.lib2.type),
            ),
        )
    if single:
        handle = _require(data.handle, "handle", obj)
        return LibraryFiles("single", (ReadsFileSource("single", handle),))
    handle_1 = _require(data.handle_1, "handle_1", obj)
    if data.handle_2 is None:
        return LibraryFiles(
            "interleaved", (ReadsFileSource("inter", handle_1),)
        )
    return LibraryFiles(
        "paired",
        (ReadsFileSource("fwd", handle_1), ReadsFileSource("rev", data.handle_2)),
    )


def safe_output_dirname(value: str | None) -> str | None:
    """Reduce a requested output directory to a single safe path component."""
    if value is None:
        return None
    normalized = value.strip().replace("\\", "/")
    candidate = Path(normalized).name
    if candidate in {"", ".", ".."}:
        return None
    return candidate


def stage_reads_file(
    source: ReadsFileSource,
    *,
    obj: WorkspaceObject,
    blob_store: BlobStore,
    prefix: Path,
) -> LocalReadsFile:
    """Download one reads file, resolve its type and give it a canonical name."""
    raw_path = prefix.with_name(f"{prefix.name}.{source.role}.download")
    try:
        blob = blob_store.download(source.handle.id, raw_path)
        resolved = resolve_reads_file_type(
            type_field=source.type_field,
            declared_filename=source.handle.file_name,
            storage_filename=blob.filename,
            identifier=(
                f"reads object {obj.name} ({obj.absolute_ref}), "
                f"storage node {source.handle.id}"
            ),
        )
    except Exception:
        raw_path.unlink(missing_ok=True)
        raise
    logger.info(
        "Resolved %s file of %s from %s %r: gzipped=%s",
        source.role,
        obj.absolute_ref,
        resolved.source_field,
        resolved.source,
        resolved.gzipped,
    )
    staged = prefix.with_name(f"{prefix.name}.{source.role}{resolved.extension}")
    blob.path.replace(staged)
    return LocalReadsFile(
        path=staged,
        gzipped=resolved.gzipped,
        name=blob.filename or source.handle.file_name,
        resolved=resolved,
    )


def _target_gzip(options: OutputOptions, inputs: tuple[LocalReadsFile, ...]) -> bool:
    if options.gzip is not None:
        return options.gzip
    return all(item.gzipped for item in inputs)


def _finalize(
    path: Path,
    *,
    gzipped: bool,
    options: OutputOptions,
    inputs: tuple[LocalReadsFile, ...],
) -> tuple[Path, bool]:
    target = _target_gzip(options, inputs)
    return fastq.set_compression(path, gzipped, target), target


def arrange_files(
    layout: LibraryLayout,
    staged: tuple[LocalReadsFile, ...],
    *,
    prefix: Path,
    options: OutputOptions,
) -> ReadsFiles:
    """Apply the requested layout and compression to staged reads files."""
    if layout == "paired" and options.interleaved:
        fwd, rev = staged
        inter = fastq.interleave(
            fwd.path,
            rev.path,
            prefix.with_name(f"{prefix.name}.inter.fastq"),
            fwd_gzipped=fwd.gzipped,
            rev_gzipped=rev.gzipped,
        )
        fwd.path.unlink()
        rev.path.unlink()
        path, gzipped = _finalize(inter, gzipped=False, options=options, inputs=staged)
        return ReadsFiles(
            fwd=str(path),
            fwd_name=fwd.name,
            rev_name=rev.name,
            otype=layout,
            type="interleaved",
            gzipped=gzipped,
        )
    if layout == "interleaved" and options.interleaved is False:
        (inter,) = staged
        fwd_path, rev_path = fastq.deinterleave(
            inter.path,
            prefix.with_name(f"{prefix.name}.fwd.fastq"),
            prefix.with_name(f"{prefix.name}.rev.fastq"),
            gzipped=inter.gzipped,
        )
        inter.path.unlink()
        fwd_out, gzipped = _finalize(
            fwd_path, gzipped=False, options=options, inputs=staged
        )
        rev_out, _ = _finalize(rev_path, gzipped=False, options=options, inputs=staged)
        return ReadsFiles(
            fwd=str(fwd_out),
            fwd_name=inter.name,
            rev_name=inter.name,
            rev=str(rev_out),
            otype=layout,
            type="paired",
            gzipped=gzipped,
        )

    outputs = [
        _finalize(item.path, gzipped=item.gzipped, options=options, inputs=(item,))
        for item in staged
    ]
    gzipped = all(flag for _, flag in outputs)
    if layout == "paired":
        fwd, rev = staged
        if options.gzip is None and fwd.gzipped != rev.gzipped:
            # Mixed compression is normalized to plain text.
            outputs = [
                (fastq.set_compression(path, flag, False), False)
                for path, flag in outputs
            ]
            gzipped = False
        return ReadsFiles(
            fwd=str(outputs[0][0]),
            fwd_name=fwd.name,
            rev=str(outputs[1][0]),
            rev_name=rev.name,
            otype=layout,
            type=layout,
            gzipped=gzipped,
        )
    (only,) = staged
    return ReadsFiles(
        fwd=str(outputs[0][0]),
        fwd_name=only.name,
        otype=layout,
        type=layout,
        gzipped=gzipped,
    )


def discard_library_files(prefix: Path) -> None:
    """Remove every file staged or produced under ``prefix``."""
    for path in prefix.parent.glob(f"{prefix.name}.*"):
        logger.info("Removing %s", path)
        path.unlink(missing_ok=True)


def _discard_converted(converted: ConvertedReadLibrary) -> None:
    for name in (converted.files.fwd, converted.files.rev):
        if name is not None:
            Path(name).unlink(missing_ok=True)


def _tern(value: bool | int | None) -> bool | None:
    if value is None:
        return None
    return bool(value)


def convert_library(
    obj: WorkspaceObject,
    *,
    blob_store: BlobStore,
    options: ConversionOptions,
) -> ConvertedReadLibrary:
    """Use-case: convert one workspace reads library into local FASTQ files."""
    library = library_layout(obj)
    logger.info(
        "Processing read library %s (%s), type %s",
        obj.absolute_ref,
        obj.name,
        obj.type_string,
    )
    out_dir = options.scratch_dir
    subdir = safe_output_dirname(options.output_dir)
    if subdir is not None:
        out_dir = out_dir / subdir
    out_dir.mkdir(parents=True, exist_ok=True)
    prefix = out_dir / str(uuid.uuid4())

    try:
        staged = tuple(
            stage_reads_file(source, obj=obj, blob_store=blob_store, prefix=prefix)
            for source in library.sources
        )
        files = arrange_files(
            library.layout, staged, prefix=prefix, options=options.output
        )
    except Exception:
        discard_library_files(prefix)
        raise

    _, kbase_file = check_library_type(obj)
    data = obj.data
    single_genome = _tern(data.single_genome)
    if kbase_file and single_genome is None:
        single_genome = True
    orientation = None
    if library.layout != "single":
        orientation = _tern(data.read_orientation_outward)
        if kbase_file and orientation is None:
            orientation = False
    return ConvertedReadLibrary(
        ref=obj.absolute_ref,
        files=files,
        single_genome=single_genome if kbase_file else None,
        read_orientation_outward=orientation,
        sequencing_tech=data.sequencing_tech,
        insert_size_mean=data.insert_size_mean,
        insert_size_std_dev=data.insert_size_std_dev,
        read_count=data.read_count,
        read_size=data.read_size,
        gc_content=data.gc_content,
    )


def convert_read_libraries(
    params: ConvertReadLibraryParams | Mapping[str, object],
    *,
    workspace: WorkspaceReader,
    blob_store: BlobStore,
    scratch_dir: Path,
) -> ConvertReadLibraryOutput:
    """Use-case: convert every requested read library to files.

    Raises
    ------
    ConversionError
        If parameters are invalid or any library fails to convert.
    """
    try:
        config = (
            params
            if isinstance(params, ConvertReadLibraryParams)
            else ConvertReadLibraryParams.model_validate(dict(params))
        )
        refs = config.qualified_refs()
    except (ValidationError, ValueError) as exc:
        raise ConversionError(f"Invalid conversion parameters: {exc}") from exc

    options = build_conversion_options(
        scratch_dir=scratch_dir,
        gzip=config.gzip,
        interleaved=config.interleaved,
        output_dir=config.output_dir,
    )
    raw_objects = workspace.get_objects(refs)
    if len(raw_objects) != len(refs):
        raise StorageError(
            f"Workspace returned {len(raw_objects)} objects for {len(refs)} references"
        )

    files: dict[str, ConvertedReadLibrary] = {}
    try:
        for ref, raw in zip(config.read_libraries, raw_objects, strict=True):
            try:
                obj = WorkspaceObject.model_validate(raw)
            except ValidationError as exc:
                raise UnsupportedLibraryTypeError(
                    f"Object {ref} is not a readable reads library: {exc}"
                ) from exc
            files[ref] = convert_library(obj, blob_store=blob_store, options=options)
    except Exception:
        # A failed request leaves no outputs behind.
        for converted in files.values():
            _discard_converted(converted)
        raise
    return ConvertReadLibraryOutput(files=files)


def build_conversion_options(
    *,
    scratch_dir: Path,
    gzip: bool | None = None,
    interleaved: bool | None = None,
    output_dir: str | None = None,
) -> ConversionOptions:
    """Build typed option object from request params."""
    return ConversionOptions(
        scratch_dir=scratch_dir,
        output=OutputOptions(gzip=gzip, interleaved=interleaved),
        output_dir=output_dir,
    )
