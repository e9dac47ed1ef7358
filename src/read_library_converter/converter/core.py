"""Shared JSON-RPC service core for the conversion daemon."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from read_library_converter import __version__
from read_library_converter.adapters.blobstore import ShockBlobStore
from read_library_converter.adapters.workspace import WorkspaceRpcReader
from read_library_converter.application.ports import BlobStore, WorkspaceReader
from read_library_converter.application.use_cases import convert_read_libraries
from read_library_converter.client.baseclient import JsonRpcCaller
from read_library_converter.client.client import CONVERT_METHOD, STATUS_METHOD
from read_library_converter.config import ServiceConfig
from read_library_converter.errors import ConversionError
from read_library_converter.types import JsonValue

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
SERVER_ERROR = -32500


class RpcError(Exception):
    """JSON-RPC error to be reported to the caller."""

    def __init__(self, name: str, code: int, message: str, data: str = "") -> None:
        super().__init__(message)
        self.name = name
        self.code = code
        self.message = message
        self.data = data

    def to_payload(self) -> dict[str, JsonValue]:
        """Render the ``error`` member of a JSON-RPC response."""
        return {
            "name": self.name,
            "code": self.code,
            "message": self.message,
            "error": self.data,
        }


@dataclass(frozen=True)
class RpcRequest:
    """Parsed JSON-RPC 1.1 request.

    Parameters
    ----------
    method : str
        Fully qualified method name, e.g.
        ``kb_read_library_to_file.convert_read_library_to_file``.
    params : list
        Positional parameters.
    id : str | None
        Request id echoed back in the response.
    """

    method: str
    params: list[JsonValue]
    id: str | None = None
    version: str = "1.1"


def parse_rpc_request(payload: object) -> RpcRequest:
    """Validate a decoded JSON-RPC request body.

    Raises
    ------
    RpcError
        If the body is not a valid JSON-RPC request.
    """
    if not isinstance(payload, dict):
        raise RpcError("JSONRPCError", INVALID_REQUEST, "Request must be a JSON object")
    method = payload.get("method")
    if not isinstance(method, str) or not method:
        raise RpcError("JSONRPCError", INVALID_REQUEST, "Request is missing a method")
    params = payload.get("params", [])
    if not isinstance(params, list):
        raise RpcError(
            "JSONRPCError", INVALID_REQUEST, "Request params must be a JSON array"
        )
    request_id = payload.get("id")
    return RpcRequest(
        method=method,
        params=params,
        id=None if request_id is None else str(request_id),
        version=str(payload.get("version", "1.1")),
    )


def _default_workspace_factory(config: ServiceConfig, token: str | None) -> WorkspaceReader:
    caller = JsonRpcCaller(
        config.workspace_url,
        token=token,
        timeout=config.rpc_timeout,
        allow_insecure_http=True,
    )
    return WorkspaceRpcReader(caller)


def _default_blob_store_factory(config: ServiceConfig, token: str | None) -> BlobStore:
    return ShockBlobStore(config.shock_url, token, timeout=config.rpc_timeout)


@dataclass
class ConverterService:
    """Dispatch JSON-RPC requests to conversion use-cases.

    Storage adapters are built per request so each call runs with the
    caller's token.
    """

    config: ServiceConfig
    workspace_factory: Callable[[ServiceConfig, str | None], WorkspaceReader] = (
        _default_workspace_factory
    )
    blob_store_factory: Callable[[ServiceConfig, str | None], BlobStore] = (
        _default_blob_store_factory
    )
    methods: dict[str, Callable[[list[JsonValue], str | None], JsonValue]] = field(
        init=False
    )

    def __post_init__(self) -> None:
        self.methods = {
            CONVERT_METHOD: self._convert,
            STATUS_METHOD: self._status,
        }

    def _convert(self, params: list[JsonValue], token: str | None) -> JsonValue:
        if len(params) != 1 or not isinstance(params[0], Mapping):
            raise RpcError(
                "JSONRPCError",
                SERVER_ERROR,
                "convert_read_library_to_file takes exactly one parameter object",
            )
        workspace = self.workspace_factory(self.config, token)
        blob_store = self.blob_store_factory(self.config, token)
        try:
            output = convert_read_libraries(
                params[0],
                workspace=workspace,
                blob_store=blob_store,
                scratch_dir=Path(self.config.scratch_dir),
            )
        finally:
            for adapter in (workspace, blob_store):
                close = getattr(adapter, "close", None)
                if callable(close):
                    close()
        return output.model_dump(mode="json")

    def _status(self, params: list[JsonValue], token: str | None) -> JsonValue:
        del params, token
        return {"state": "OK", "message": "", "version": __version__}

    def dispatch(self, request: RpcRequest, token: str | None = None) -> JsonValue:
        """Run the requested method and return its result list.

        Raises
        ------
        RpcError
            If the method is unknown or conversion fails with a domain error.
        """
        handler = self.methods.get(request.method)
        if handler is None:
            raise RpcError(
                "JSONRPCError",
                METHOD_NOT_FOUND,
                f"No such method: {request.method}",
            )
        try:
            return [handler(request.params, token)]
        except ConversionError as exc:
            logger.info("Conversion failed: %s", exc)
            raise RpcError(
                type(exc).__name__,
                SERVER_ERROR,
                str(exc),
                "".join(traceback.format_exception_only(type(exc), exc)),
            ) from exc


def success_response(request: RpcRequest, result: JsonValue) -> dict[str, JsonValue]:
    """Build a JSON-RPC success response body."""
    return {"version": request.version, "result": result, "id": request.id}


def error_response(error: RpcError, request: RpcRequest | None = None) -> dict[str, JsonValue]:
    """Build a JSON-RPC error response body."""
    return {
        "version": request.version if request else "1.1",
        "error": error.to_payload(),
        "id": request.id if request else None,
    }
