"""Unit tests for request schemas and service configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from read_library_converter.config import ServiceConfig
from read_library_converter.schemas import (
    ConvertReadLibraryParams,
    Handle,
    WorkspaceObject,
    parse_tern,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        (True, True),
        (False, False),
        ("true", True),
        ("FALSE", False),
        (" True ", True),
    ],
)
def test_parse_tern(value: object, expected: bool | None) -> None:
    """Accept booleans, null and case-insensitive boolean strings."""
    assert parse_tern(value) is expected


@pytest.mark.parametrize("value", ["yes", 1, "", 0.0])
def test_parse_tern_rejects_other_values(value: object) -> None:
    """Reject anything that is not a ternary value."""
    with pytest.raises(ValueError, match="ternary"):
        parse_tern(value)


def test_params_require_at_least_one_library() -> None:
    """Reject an empty library list."""
    with pytest.raises(ValidationError):
        ConvertReadLibraryParams(read_libraries=[])


def test_params_reject_blank_refs_and_unknown_fields() -> None:
    """Reject blank references and unexpected parameters."""
    with pytest.raises(ValidationError, match="empty references"):
        ConvertReadLibraryParams(read_libraries=["1/2/3", " "])
    with pytest.raises(ValidationError):
        ConvertReadLibraryParams.model_validate(
            {"read_libraries": ["1/2/3"], "compress": True}
        )


def test_params_normalize_terns_and_blanks() -> None:
    """Normalize string terns and treat blank names as absent."""
    params = ConvertReadLibraryParams.model_validate(
        {
            "read_libraries": ["1/2/3"],
            "gzip": "true",
            "interleaved": "false",
            "workspace_name": "  ",
            "output_dir": " out ",
        }
    )
    assert params.gzip is True
    assert params.interleaved is False
    assert params.workspace_name is None
    assert params.output_dir == "out"


def test_qualified_refs_prefix_bare_names() -> None:
    """Prefix bare object names with the workspace name."""
    params = ConvertReadLibraryParams(
        read_libraries=["reads", "7/8/9", "otherws/reads2"],
        workspace_name="myws",
    )
    assert params.qualified_refs() == ["myws/reads", "7/8/9", "otherws/reads2"]


def test_qualified_refs_need_workspace_name_for_bare_names() -> None:
    """Refuse bare names without a workspace to qualify them."""
    params = ConvertReadLibraryParams(read_libraries=["reads"])
    with pytest.raises(ValueError, match="workspace_name is required"):
        params.qualified_refs()


def test_handle_accepts_filename_alias() -> None:
    """Read the declared filename from ``file_name`` or ``filename``."""
    assert Handle.model_validate({"id": "n1", "file_name": "a.fq"}).file_name == "a.fq"
    assert Handle.model_validate({"id": "n1", "filename": "b.fq"}).file_name == "b.fq"
    assert Handle.model_validate({"id": "n1"}).file_name is None


def test_workspace_object_reference_fields() -> None:
    """Build the absolute reference from the object info tuple."""
    obj = WorkspaceObject.model_validate(
        {
            "info": [2, "reads", "KBaseFile.SingleEndLibrary-2.2", "", 3, "u", 1],
            "data": {"lib": {"file": {"id": "n1"}}, "extra": "ignored"},
        }
    )
    assert obj.absolute_ref == "1/2/3"
    assert obj.name == "reads"
    assert obj.type_string == "KBaseFile.SingleEndLibrary-2.2"
    assert obj.data.lib is not None
    assert obj.data.lib.file.id == "n1"


def test_service_config_defaults() -> None:
    """Use documented defaults when no environment variables are set."""
    config = ServiceConfig.from_env({})
    assert config.workspace_url == "https://kbase.us/services/ws"
    assert config.shock_url == "https://kbase.us/services/shock-api"
    assert config.http_port == 5000
    assert config.rpc_timeout == 1800.0


def test_service_config_from_env(tmp_path: Path) -> None:
    """Read ``READLIB_*`` variables and ignore blank ones."""
    config = ServiceConfig.from_env(
        {
            "READLIB_WORKSPACE_URL": "http://ws.local",
            "READLIB_SHOCK_URL": "http://shock.local",
            "READLIB_SCRATCH_DIR": str(tmp_path),
            "READLIB_HTTP_PORT": "8080",
            "READLIB_RPC_TIMEOUT": "60",
            "READLIB_HTTP_HOST": " ",
            "UNRELATED": "x",
        }
    )
    assert config.workspace_url == "http://ws.local"
    assert config.shock_url == "http://shock.local"
    assert config.scratch_dir == tmp_path
    assert config.http_port == 8080
    assert config.rpc_timeout == 60.0
    assert config.http_host == "0.0.0.0"


def test_service_config_rejects_bad_port() -> None:
    """Reject ports outside the TCP range."""
    with pytest.raises(ValidationError):
        ServiceConfig.from_env({"READLIB_HTTP_PORT": "70000"})
