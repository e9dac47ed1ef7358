"""JSON-RPC client for the read library conversion service."""

from read_library_converter.client.baseclient import JsonRpcCaller, ServerError
from read_library_converter.client.client import ReadLibraryToFileClient

__all__ = ["JsonRpcCaller", "ReadLibraryToFileClient", "ServerError"]
