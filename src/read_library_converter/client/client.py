"""Client for the ``kb_read_library_to_file`` service.

Takes KBaseFile/KBaseAssembly PairedEndLibrary/SingleEndLibrary reads library
workspace references and returns FASTQ files along with file metadata.

The file type and suffix of each reads file is determined from, in order of
precedence, the ``lib?/type`` field of KBaseFile types, the
``lib?/file/file_name`` or ``handle?/file_name`` field, and the Shock
filename. Reads files must carry a case-insensitive ``.fq`` or ``.fastq``
suffix, optionally followed by ``.gz``; anything else is rejected by the
service.
"""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from read_library_converter.client.baseclient import (
    DEFAULT_TIMEOUT,
    JsonRpcCaller,
    ServerError,
)
from read_library_converter.schemas import (
    ConvertReadLibraryOutput,
    ConvertReadLibraryParams,
)
from read_library_converter.types import JsonValue

SERVICE_NAME = "kb_read_library_to_file"
CONVERT_METHOD = f"{SERVICE_NAME}.convert_read_library_to_file"
STATUS_METHOD = f"{SERVICE_NAME}.status"


class ReadLibraryToFileClient:
    """Typed client for ``convert_read_library_to_file``."""

    def __init__(
        self,
        url: str,
        token: str | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        trust_all_ssl_certificates: bool = False,
        allow_insecure_http: bool = False,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._caller = JsonRpcCaller(
            url,
            token=token,
            timeout=timeout,
            trust_all_ssl_certificates=trust_all_ssl_certificates,
            allow_insecure_http=allow_insecure_http,
            http_client=http_client,
        )

    @property
    def url(self) -> str:
        """Service URL this client talks to."""
        return self._caller.url

    @property
    def token(self) -> str | None:
        """Authorization token, if any."""
        return self._caller.token

    @property
    def timeout(self) -> float | None:
        """Request timeout in seconds."""
        return self._caller.timeout

    @timeout.setter
    def timeout(self, seconds: float | None) -> None:
        # Zero or None disables the timeout.
        self._caller.timeout = seconds or None

    def close(self) -> None:
        """Release the HTTP connection pool."""
        self._caller.close()

    def __enter__(self) -> ReadLibraryToFileClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def convert_read_library_to_file(
        self,
        params: ConvertReadLibraryParams | Mapping[str, object],
        *,
        context: Mapping[str, JsonValue] | None = None,
    ) -> ConvertReadLibraryOutput:
        """Convert read libraries to files.

        Raises
        ------
        ServerError
            If the service reports an error, e.g. an unrecognized reads
            file suffix.
        """
        if isinstance(params, ConvertReadLibraryParams):
            payload = params.model_dump(mode="json", exclude_none=True)
        else:
            payload = dict(params)
        result = self._caller.call(CONVERT_METHOD, [payload], context=context)
        if not result:
            raise ServerError("Unknown", 0, "empty result list")
        return ConvertReadLibraryOutput.model_validate(result[0])

    def status(self) -> dict[str, JsonValue]:
        """Return the service status record."""
        result = self._caller.call(STATUS_METHOD, [])
        if not result or not isinstance(result[0], dict):
            raise ServerError("Unknown", 0, "malformed status result")
        return result[0]
