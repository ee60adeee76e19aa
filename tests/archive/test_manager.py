"""Tests for LocalArchive."""

import json
import threading
from pathlib import Path

import pytest

from mindpalace.archive import ARCHIVE_KEY, InMemoryStore, JSONFileStore, LocalArchive, SQLiteStore
from mindpalace.models import ArchivedEntry, Method, PalaceResult


VALID_DATA = {"title": "t", "method": "PALACE", "summary": "", "points": []}


def make_result(title: str) -> PalaceResult:
    return PalaceResult(title=title, method=Method.PALACE, summary="s")


@pytest.fixture(params=["memory", "json", "sqlite"])
def store(request, tmp_path: Path):
    """Each archive test runs against every backend."""
    if request.param == "memory":
        yield InMemoryStore()
    elif request.param == "json":
        yield JSONFileStore(tmp_path)
    else:
        sqlite_store = SQLiteStore(tmp_path / "archive.db")
        sqlite_store.init_db()
        yield sqlite_store
        sqlite_store.close()


class BrokenStore:
    """Store whose every operation fails."""

    def load(self, key: str) -> str | None:
        raise OSError("disk on fire")

    def save(self, key: str, value: str) -> None:
        raise OSError("disk full")


class TestLoad:
    def test_empty_when_nothing_stored(self, store):
        assert LocalArchive(store).load() == []

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "42",
            '{"a": 1}',
            '"text"',
            "[5]",
            '[{"id": "1", "createdAt": 1, "data": []}]',
            '[{"id": "1", "createdAt": 1, "data": "text"}]',
            '[{"id": "1", "createdAt": 1, "data": 5}]',
            json.dumps([{"id": "1", "createdAt": 1e400, "data": VALID_DATA}]),
            json.dumps([{"id": "1", "createdAt": 1, "data": {**VALID_DATA, "title": None}}]),
        ],
    )
    def test_corrupt_storage_degrades_to_empty(self, raw):
        archive = LocalArchive(InMemoryStore({ARCHIVE_KEY: raw}))
        assert archive.load() == []

    def test_unreadable_storage_degrades_to_empty(self):
        assert LocalArchive(BrokenStore()).load() == []

    def test_skips_invalid_entries(self, mnemonic_result: PalaceResult):
        good = ArchivedEntry.create(mnemonic_result, created_at=5).to_dict()
        raw = json.dumps([{"id": "1"}, good, "garbage"])
        entries = LocalArchive(InMemoryStore({ARCHIVE_KEY: raw})).load()
        assert [e.id for e in entries] == ["5"]

    def test_reads_browser_format(self):
        """Lists written by the browser app load unchanged."""
        raw = json.dumps([
            {
                "id": "1717171717171",
                "title": "Planets",
                "createdAt": 1717171717171,
                "data": {
                    "title": "Planets",
                    "method": "OBJECTS",
                    "summary": "Order of the planets",
                    "points": [
                        {
                            "content": "Mercury is closest to the sun",
                            "association": "Thermometer",
                            "visualPrompt": "A melting thermometer",
                            "story": "The thermometer melts on the hot plate.",
                        }
                    ],
                },
            }
        ])
        entries = LocalArchive(InMemoryStore({ARCHIVE_KEY: raw})).load()
        assert len(entries) == 1
        assert entries[0].data.method is Method.OBJECTS
        assert entries[0].data.slogan is None


class TestAppend:
    def test_append_then_fresh_load(self, store, mnemonic_result: PalaceResult):
        archive = LocalArchive(store)
        archive.append(ArchivedEntry.create(make_result("old"), created_at=1))
        before = LocalArchive(store).load()

        entry = ArchivedEntry.create(mnemonic_result, created_at=2)
        returned = archive.append(entry)

        reloaded = LocalArchive(store).load()
        assert reloaded[0] == entry
        assert len(reloaded) == len(before) + 1
        assert returned == reloaded

    def test_most_recent_first(self, store):
        archive = LocalArchive(store)
        for stamp in (1, 2, 3):
            archive.append(ArchivedEntry.create(make_result(f"r{stamp}"), created_at=stamp))
        assert [e.title for e in archive.load()] == ["r3", "r2", "r1"]

    def test_duplicate_id_rejected(self, store):
        archive = LocalArchive(store)
        archive.append(ArchivedEntry.create(make_result("a"), created_at=7))
        with pytest.raises(ValueError):
            archive.append(ArchivedEntry.create(make_result("b"), created_at=7))
        assert len(archive.load()) == 1

    def test_append_overwrites_corrupt_storage(self):
        store = InMemoryStore({ARCHIVE_KEY: "{broken"})
        archive = LocalArchive(store)
        entries = archive.append(ArchivedEntry.create(make_result("a"), created_at=1))
        assert len(entries) == 1
        assert len(json.loads(store.load(ARCHIVE_KEY))) == 1

    def test_write_failure_is_best_effort(self):
        """A failed write still returns the updated list."""
        entries = LocalArchive(BrokenStore()).append(
            ArchivedEntry.create(make_result("a"), created_at=1)
        )
        assert [e.title for e in entries] == ["a"]

    def test_uses_custom_key(self):
        store = InMemoryStore()
        LocalArchive(store, key="other").append(ArchivedEntry.create(make_result("a"), created_at=1))
        assert store.load("other") is not None
        assert store.load(ARCHIVE_KEY) is None


class TestRecord:
    def test_record_creates_entry(self, store, mnemonic_result: PalaceResult):
        archive = LocalArchive(store)
        entry, entries = archive.record(mnemonic_result, created_at=100)
        assert entry.id == "100"
        assert entry.title == mnemonic_result.title
        assert entries[0] == entry

    def test_record_bumps_colliding_timestamp(self, store):
        archive = LocalArchive(store)
        first, _ = archive.record(make_result("a"), created_at=100)
        second, entries = archive.record(make_result("b"), created_at=100)
        assert first.id == "100"
        assert second.id == "101"
        assert len({e.id for e in entries}) == 2

    def test_concurrent_records_keep_unique_ids(self):
        archive = LocalArchive(InMemoryStore())
        threads = [
            threading.Thread(target=archive.record, args=(make_result(str(i)), 500))
            for i in range(10)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        entries = archive.load()
        assert len(entries) == 10
        assert len({e.id for e in entries}) == 10


class TestGet:
    def test_get_existing(self, store):
        archive = LocalArchive(store)
        entry, _ = archive.record(make_result("a"), created_at=9)
        assert archive.get("9") == entry

    def test_get_missing(self, store):
        assert LocalArchive(store).get("nope") is None


class TestClose:
    def test_close_releases_sqlite_connection(self, tmp_path: Path):
        sqlite_store = SQLiteStore(tmp_path / "archive.db")
        sqlite_store.init_db()
        archive = LocalArchive(sqlite_store)
        archive.record(make_result("a"), created_at=1)
        assert sqlite_store._conn is not None

        archive.close()
        assert sqlite_store._conn is None

    def test_close_is_noop_for_other_stores(self):
        store = InMemoryStore()
        archive = LocalArchive(store)
        archive.record(make_result("a"), created_at=1)

        archive.close()
        assert [e.id for e in archive.load()] == ["1"]
