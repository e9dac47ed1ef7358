"""Pydantic schemas for conversion requests, results and workspace objects."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from read_library_converter.types import LibraryLayout, ReadsFormat


def parse_tern(value: object) -> bool | None:
    """Normalize a ternary value (``true``/``false``/null)."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
    raise ValueError("ternary values must be true, false, or null")


class ConvertReadLibraryParams(BaseModel):
    """Validated input for ``convert_read_library_to_file``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    read_libraries: list[str] = Field(min_length=1)
    workspace_name: str | None = None
    gzip: bool | None = None
    interleaved: bool | None = None
    output_dir: str | None = None

    @field_validator("read_libraries")
    @classmethod
    def _validate_refs(cls, value: list[str]) -> list[str]:
        if any(not ref.strip() for ref in value):
            raise ValueError("read_libraries cannot contain empty references.")
        return value

    @field_validator("gzip", "interleaved", mode="before")
    @classmethod
    def _normalize_tern(cls, value: object) -> bool | None:
        return parse_tern(value)

    @field_validator("workspace_name", "output_dir")
    @classmethod
    def _blank_as_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    def qualified_refs(self) -> list[str]:
        """Return references with bare object names prefixed by the workspace."""
        qualified: list[str] = []
        for ref in self.read_libraries:
            ref = ref.strip()
            if "/" in ref:
                qualified.append(ref)
                continue
            if self.workspace_name is None:
                raise ValueError(
                    f"workspace_name is required for the non-absolute reference {ref}"
                )
            qualified.append(f"{self.workspace_name}/{ref}")
        return qualified


class ReadsFiles(BaseModel):
    """Produced reads files for one library."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    fwd: str
    fwd_name: str | None = None
    rev: str | None = None
    rev_name: str | None = None
    otype: LibraryLayout
    type: LibraryLayout
    file_format: ReadsFormat = "fastq"
    gzipped: bool = False


class ConvertedReadLibrary(BaseModel):
    """Converted files and copied metadata for one library."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    ref: str
    files: ReadsFiles
    single_genome: bool | None = None
    read_orientation_outward: bool | None = None
    sequencing_tech: str | None = None
    insert_size_mean: float | None = None
    insert_size_std_dev: float | None = None
    read_count: int | None = None
    read_size: int | None = None
    gc_content: float | None = None


class ConvertReadLibraryOutput(BaseModel):
    """Result of ``convert_read_library_to_file`` keyed by input reference."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    files: dict[str, ConvertedReadLibrary]


class Handle(BaseModel):
    """Handle record pointing at a blob store node."""

    model_config = ConfigDict(extra="ignore")

    id: str
    file_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("file_name", "filename"),
    )
    url: str | None = None


class KBaseFileLib(BaseModel):
    """``lib``/``lib1``/``lib2`` entry of a KBaseFile reads library."""

    model_config = ConfigDict(extra="ignore")

    file: Handle
    type: str | None = None
    encoding: str | None = None
    size: int | None = None


class ReadsObjectData(BaseModel):
    """Union of the KBaseFile and KBaseAssembly reads library fields used here."""

    model_config = ConfigDict(extra="ignore")

    lib: KBaseFileLib | None = None
    lib1: KBaseFileLib | None = None
    lib2: KBaseFileLib | None = None
    handle: Handle | None = None
    handle_1: Handle | None = None
    handle_2: Handle | None = None
    single_genome: bool | int | None = None
    read_orientation_outward: bool | int | None = None
    sequencing_tech: str | None = None
    insert_size_mean: float | None = None
    insert_size_std_dev: float | None = None
    read_count: int | None = None
    read_size: int | None = None
    gc_content: float | None = None


class WorkspaceObject(BaseModel):
    """Object returned by the workspace service."""

    model_config = ConfigDict(extra="ignore")

    info: list[object] = Field(min_length=7)
    data: ReadsObjectData

    @property
    def absolute_ref(self) -> str:
        """``wsid/objid/version`` reference of the object."""
        return f"{self.info[6]}/{self.info[0]}/{self.info[4]}"

    @property
    def name(self) -> str:
        """Workspace object name."""
        return str(self.info[1])

    @property
    def type_string(self) -> str:
        """Full workspace type, e.g. ``KBaseFile.PairedEndLibrary-2.0``."""
        return str(self.info[2])
