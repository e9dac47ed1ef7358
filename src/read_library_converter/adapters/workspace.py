"""Workspace service adapter."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from read_library_converter.client.baseclient import JsonRpcCaller, ServerError
from read_library_converter.errors import StorageError
from read_library_converter.types import JsonObject

logger = logging.getLogger(__name__)

GET_OBJECTS_METHOD = "Workspace.get_objects2"


class WorkspaceRpcReader:
    """Fetch reads library objects through the workspace JSON-RPC API."""

    def __init__(self, caller: JsonRpcCaller) -> None:
        self._caller = caller

    def close(self) -> None:
        """Close the underlying RPC caller."""
        self._caller.close()

    def get_objects(self, refs: Sequence[str]) -> list[JsonObject]:
        """Return workspace objects for ``refs`` in request order.

        Raises
        ------
        StorageError
            If the workspace cannot be reached, reports an error, or returns an
            unexpected payload.
        """
        logger.info("Fetching %d reads objects from the workspace", len(refs))
        try:
            result = self._caller.call(
                GET_OBJECTS_METHOD,
                [{"objects": [{"ref": ref} for ref in refs]}],
            )
        except ServerError as exc:
            raise StorageError(f"Workspace request failed: {exc.message}") from exc
        except httpx.HTTPError as exc:
            raise StorageError(f"Workspace request failed: {exc}") from exc
        if not result or not isinstance(result[0], dict):
            raise StorageError("Workspace returned a malformed get_objects2 result")
        data = result[0].get("data")
        if not isinstance(data, list):
            raise StorageError("Workspace returned a malformed get_objects2 result")
        return [item for item in data if isinstance(item, dict)]
