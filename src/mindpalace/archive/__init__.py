"""Local archive of generated results."""

from .manager import ARCHIVE_KEY, LocalArchive
from .store import InMemoryStore, JSONFileStore, KeyValueStore, SQLiteStore

__all__ = [
    "ARCHIVE_KEY",
    "InMemoryStore",
    "JSONFileStore",
    "KeyValueStore",
    "LocalArchive",
    "SQLiteStore",
]
