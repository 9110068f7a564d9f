"""Persistence bridge for save/restore files."""

from .bridge import FORMAT_TAG, StorageBridge, decode, encode
from .fileref import FileRef
from .store import HostStore, JsonFileStore, MemoryStore, open_store

__all__ = [
    "FORMAT_TAG",
    "FileRef",
    "HostStore",
    "JsonFileStore",
    "MemoryStore",
    "StorageBridge",
    "decode",
    "encode",
    "open_store",
]
