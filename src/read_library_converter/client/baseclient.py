"""JSON-RPC 1.1 caller used by service clients."""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Mapping, Sequence
from urllib.parse import urlparse

import httpx

from read_library_converter.types import JsonValue

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30 * 60.0
RPC_VERSION = "1.1"


class ServerError(Exception):
    """Error object returned by a JSON-RPC service.

    Parameters
    ----------
    name : str
        Error name reported by the server, e.g. ``UnrecognizedSuffixError``.
    code : int
        JSON-RPC error code.
    message : str
        Human-readable error message.
    data : str
        Additional error detail such as a server-side traceback.
    """

    def __init__(self, name: str, code: int, message: str, data: str = "") -> None:
        super().__init__(message)
        self.name = name
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        detail = f"\n{self.data}" if self.data else ""
        return f"{self.name}: {self.code}. {self.message}{detail}"


class JsonRpcCaller:
    """Send JSON-RPC 1.1 requests to a service over HTTP.

    Parameters
    ----------
    url : str
        Service endpoint.
    token : str | None, default=None
        Authorization token sent in the ``Authorization`` header.
    timeout : float, default=1800
        Request timeout in seconds.
    trust_all_ssl_certificates : bool, default=False
        Skip TLS certificate verification.
    allow_insecure_http : bool, default=False
        Allow sending a token over plain ``http://``.
    http_client : httpx.Client | None, default=None
        Preconfigured client; the caller does not close it.
    """

    def __init__(
        self,
        url: str,
        *,
        token: str | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
        trust_all_ssl_certificates: bool = False,
        allow_insecure_http: bool = False,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not url:
            raise ValueError("A url is required")
        scheme = urlparse(url).scheme
        if scheme not in {"http", "https"}:
            raise ValueError(f"{url} isn't a valid http url")
        if token and scheme == "http" and not allow_insecure_http:
            raise ValueError(
                "Refusing to send an authorization token over insecure http; "
                "set allow_insecure_http to override"
            )
        self.url = url
        self.token = token
        self.timeout = timeout
        self.trust_all_ssl_certificates = trust_all_ssl_certificates
        self.allow_insecure_http = allow_insecure_http
        self._client = http_client
        self._owns_client = http_client is None

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                verify=not self.trust_all_ssl_certificates,
            )
        return self._client

    def close(self) -> None:
        """Close the underlying HTTP client if this caller created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> JsonRpcCaller:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def call(
        self,
        method: str,
        params: Sequence[JsonValue],
        *,
        context: Mapping[str, JsonValue] | None = None,
    ) -> list[JsonValue]:
        """Call ``method`` with positional ``params`` and return the result list.

        Raises
        ------
        ServerError
            If the service answers with an error object or an unparsable body.
        """
        payload: dict[str, JsonValue] = {
            "method": method,
            "params": list(params),
            "version": RPC_VERSION,
            "id": str(random.random())[2:],
        }
        if context is not None:
            payload["context"] = dict(context)
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = self.token

        logger.debug("Calling %s at %s", method, self.url)
        response = self._http().post(
            self.url,
            content=json.dumps(payload),
            headers=headers,
            timeout=self.timeout,
        )
        try:
            body = response.json()
        except ValueError as exc:
            raise ServerError(
                "Unknown", response.status_code, response.text or "empty response"
            ) from exc
        if not isinstance(body, dict):
            raise ServerError("Unknown", response.status_code, "malformed response")

        error = body.get("error")
        if error is not None:
            if not isinstance(error, dict):
                raise ServerError("Unknown", response.status_code, str(error))
            raise ServerError(
                str(error.get("name", "JSONRPCError")),
                int(error.get("code", 0)),
                str(error.get("message", "")),
                str(error.get("error") or error.get("data") or ""),
            )
        response.raise_for_status()
        result = body.get("result")
        if not isinstance(result, list):
            raise ServerError("Unknown", 0, "An unknown server error occurred")
        return result
