"""Local archive of generated results."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading

from ..models import ArchivedEntry, PalaceResult, now_ms
from .store import KeyValueStore, SQLiteStore

logger = logging.getLogger(__name__)

ARCHIVE_KEY = "saved_palaces"


class LocalArchive:
    """Most-recent-first list of archived results kept in one store slot.

    The whole list is rewritten on every append. Appends on one instance
    are serialized.
    """

    def __init__(self, store: KeyValueStore, key: str = ARCHIVE_KEY) -> None:
        """Initialize the archive.

        Args:
            store: Backend holding the serialized list.
            key: Name of the slot in the store.
        """
        self.store = store
        self.key = key
        self._lock = threading.Lock()

    def load(self) -> list[ArchivedEntry]:
        """Load all archived entries.

        Returns:
            Entries most recent first; empty if nothing is stored or the
            stored value cannot be decoded.
        """
        try:
            raw = self.store.load(self.key)
        except (OSError, sqlite3.Error, UnicodeDecodeError) as e:
            logger.warning("Cannot read archive %r: %s", self.key, e)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Archive %r is corrupt, ignoring it: %s", self.key, e)
            return []

        if not isinstance(data, list):
            logger.warning("Archive %r does not hold a list, ignoring it", self.key)
            return []

        entries = []
        for item in data:
            try:
                entries.append(ArchivedEntry.from_dict(item))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning("Skipping invalid archive entry: %s", e)
        return entries

    def append(self, entry: ArchivedEntry) -> list[ArchivedEntry]:
        """Prepend an entry and persist the full list.

        Args:
            entry: The new entry.

        Returns:
            The updated list, most recent first. It is returned even if
            persisting it failed.

        Raises:
            ValueError: If an entry with the same id is already archived.
        """
        with self._lock:
            entries = self.load()
            if any(existing.id == entry.id for existing in entries):
                raise ValueError(f"Archive already holds an entry with id {entry.id}")
            entries.insert(0, entry)
            self._persist(entries)
            return entries

    def record(
        self,
        result: PalaceResult,
        created_at: int | None = None,
    ) -> tuple[ArchivedEntry, list[ArchivedEntry]]:
        """Archive a freshly generated result.

        The entry id is the creation timestamp, moved forward by a
        millisecond until it is unique in the archive.

        Returns:
            Tuple of (new entry, updated list).
        """
        with self._lock:
            entries = self.load()
            taken = {existing.id for existing in entries}
            stamp = now_ms() if created_at is None else created_at
            while str(stamp) in taken:
                stamp += 1
            entry = ArchivedEntry.create(result, created_at=stamp)
            entries.insert(0, entry)
            self._persist(entries)
            return entry, entries

    def get(self, entry_id: str) -> ArchivedEntry | None:
        """Get an archived entry by its id."""
        for entry in self.load():
            if entry.id == entry_id:
                return entry
        return None

    def close(self) -> None:
        """Release the backend's connection, if it holds one."""
        if isinstance(self.store, SQLiteStore):
            self.store.close()

    def _persist(self, entries: list[ArchivedEntry]) -> None:
        """Write the list, logging instead of raising on failure."""
        payload = json.dumps([e.to_dict() for e in entries], ensure_ascii=False)
        try:
            self.store.save(self.key, payload)
        except (OSError, sqlite3.Error) as e:
            logger.error("Failed to persist archive %r: %s", self.key, e)
