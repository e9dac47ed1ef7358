"""Shock blob store adapter."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from read_library_converter.application.results import DownloadedBlob
from read_library_converter.errors import StorageError

logger = logging.getLogger(__name__)


class ShockBlobStore:
    """Download node content and filenames from a Shock server.

    Parameters
    ----------
    url : str
        Shock API root, e.g. ``https://kbase.us/services/shock-api``.
    token : str | None, default=None
        Token sent as ``Authorization: OAuth <token>``.
    http_client : httpx.Client | None, default=None
        Preconfigured client, mainly for tests.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        *,
        timeout: float | None = 30 * 60.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        headers = {"Authorization": f"OAuth {token}"} if token else {}
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None
        self._headers = headers

    def close(self) -> None:
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            self._client.close()

    def node_filename(self, node_id: str) -> str | None:
        """Return the filename stored on a Shock node, if any."""
        try:
            response = self._client.get(
                f"{self.url}/node/{node_id}", headers=self._headers
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"Shock node {node_id} lookup failed: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise StorageError(
                f"Shock node {node_id} lookup failed with HTTP "
                f"{response.status_code}: {_shock_error(response)}"
            )
        try:
            node = response.json().get("data") or {}
            name = (node.get("file") or {}).get("name")
        except (ValueError, AttributeError) as exc:
            raise StorageError(
                f"Shock node {node_id} lookup returned a malformed body"
            ) from exc
        return name or None

    def download(self, node_id: str, destination: Path) -> DownloadedBlob:
        """Stream node content to ``destination``.

        Raises
        ------
        StorageError
            If Shock cannot be reached or reports an error for the node.
        """
        filename = self.node_filename(node_id)
        logger.info("Downloading Shock node %s (%s) to %s", node_id, filename, destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._stream_to(node_id, destination)
        except httpx.HTTPError as exc:
            raise StorageError(f"Shock node {node_id} download failed: {exc}") from exc
        return DownloadedBlob(path=destination, filename=filename)

    def _stream_to(self, node_id: str, destination: Path) -> None:
        with self._client.stream(
            "GET",
            f"{self.url}/node/{node_id}",
            params={"download_raw": ""},
            headers=self._headers,
        ) as response:
            if response.status_code != httpx.codes.OK:
                response.read()
                raise StorageError(
                    f"Shock node {node_id} download failed with HTTP "
                    f"{response.status_code}: {_shock_error(response)}"
                )
            with destination.open("wb") as handle:
                for chunk in response.iter_bytes():
                    handle.write(chunk)


def _shock_error(response: httpx.Response) -> str:
    try:
        errors = response.json().get("error")
    except (ValueError, AttributeError):
        return response.text
    if isinstance(errors, list):
        return "; ".join(str(item) for item in errors)
    return str(errors)
