"""HTTP server exposing the conversion service over JSON-RPC."""

from __future__ import annotations

import argparse
import json
import logging
from types import ModuleType
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from read_library_converter import __version__
from read_library_converter.config import ServiceConfig
from read_library_converter.converter.core import (
    PARSE_ERROR,
    SERVER_ERROR,
    ConverterService,
    RpcError,
    RpcRequest,
    error_response,
    parse_rpc_request,
    success_response,
)
from read_library_converter.types import JsonValue

logger = logging.getLogger(__name__)

_fastapi_module: ModuleType | None
try:
    import fastapi as _fastapi_module
    from fastapi import Request
    from fastapi.responses import JSONResponse
    from starlette.concurrency import run_in_threadpool
except ModuleNotFoundError:  # pragma: no cover
    _fastapi_module = None
    if not TYPE_CHECKING:

        class Request:
            """Fallback Request type used when FastAPI is not installed."""

        class JSONResponse:
            """Fallback JSONResponse type used when FastAPI is not installed."""

if TYPE_CHECKING:
    from fastapi import FastAPI

try:
    import uvicorn as _uvicorn_imported

    _uvicorn_module: ModuleType | None = _uvicorn_imported
except ModuleNotFoundError:  # pragma: no cover
    _uvicorn_module = None

uvicorn: ModuleType | None = _uvicorn_module


def _require_http_runtime() -> None:
    """Ensure HTTP server runtime dependencies are available."""
    if _fastapi_module is None:
        raise RuntimeError(
            "fastapi is required to run read-library-http. Install with extra: .[server]"
        )


class HealthResponse(BaseModel):
    """Health response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


class ReadyResponse(BaseModel):
    """Readiness response payload."""

    model_config = ConfigDict(extra="forbid")

    status: str


def _auth_token(request: Request) -> str | None:
    """Extract the caller token from the Authorization header."""
    raw = request.headers.get("authorization")
    if raw is None:
        return None
    token = raw.strip()
    if token.lower().startswith("oauth "):
        token = token[len("oauth ") :].strip()
    return token or None


def _rpc_reply(body: dict[str, JsonValue], status_code: int) -> JSONResponse:
    return JSONResponse(content=body, status_code=status_code)


def create_app(service: ConverterService | None = None) -> FastAPI:
    """Create the conversion service HTTP application.

    Parameters
    ----------
    service : ConverterService | None, default=None
        Service to dispatch to. Built from ``READLIB_*`` environment
        variables when omitted.
    """
    _require_http_runtime()
    assert _fastapi_module is not None
    rpc_service = service or ConverterService(ServiceConfig.from_env())
    app: FastAPI = _fastapi_module.FastAPI(
        title="Read Library To File",
        version=__version__,
        description="Convert workspace reads libraries to FASTQ files over JSON-RPC 1.1.",
    )

    @app.get("/healthz", response_model=HealthResponse)
    async def healthz() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/readyz", response_model=ReadyResponse)
    async def readyz() -> ReadyResponse:
        return ReadyResponse(status="ready")

    @app.post("/", response_model=None)
    @app.post("/rpc", response_model=None)
    async def rpc(request: Request) -> JSONResponse:
        """Handle one JSON-RPC 1.1 call."""
        parsed: RpcRequest | None = None
        try:
            raw = await request.body()
            try:
                decoded = json.loads(raw or b"null")
            except ValueError as exc:
                raise RpcError(
                    "JSONRPCError", PARSE_ERROR, f"Parse error: {exc}"
                ) from exc
            parsed = parse_rpc_request(decoded)
            # Conversion does blocking I/O.
            result = await run_in_threadpool(
                rpc_service.dispatch, parsed, _auth_token(request)
            )
        except RpcError as exc:
            return _rpc_reply(error_response(exc, parsed), 400)
        except Exception:
            logger.exception("unexpected error during JSON-RPC dispatch")
            internal = RpcError("JSONRPCError", SERVER_ERROR, "internal server error")
            return _rpc_reply(error_response(internal, parsed), 500)
        return _rpc_reply(success_response(parsed, result), 200)

    return app


def main() -> None:
    """Run the conversion service HTTP entrypoint."""
    _require_http_runtime()
    if uvicorn is None:
        raise RuntimeError("uvicorn is required to run read-library-http")
    config = ServiceConfig.from_env()
    parser = argparse.ArgumentParser(description="Read library to file JSON-RPC server.")
    parser.add_argument("--host", default=config.http_host)
    parser.add_argument("--port", type=int, default=config.http_port)
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()
    uvicorn.run(
        "read_library_converter.converter.http_server:create_app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        factory=True,
        reload=False,
    )


if __name__ == "__main__":
    main()
