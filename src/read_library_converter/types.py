"""Shared type aliases for reads-library conversion modules."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

type ReadsFormat = Literal["fastq"]
type LibraryLayout = Literal["single", "paired", "interleaved"]
type FileRole = Literal["single", "fwd", "rev", "inter"]
type SourceField = Literal["type", "filename", "storage_filename"]

type JsonScalar = str | int | float | bool | None
type JsonValue = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
type JsonObject = Mapping[str, JsonValue]
