"""Unit tests for the key/value substrates."""

from commerce_tutor.storage.substrate import MemoryKeyValueStore, SQLiteKeyValueStore


def test_memory_store_round_trip():
    store = MemoryKeyValueStore()
    assert store.get("missing") is None

    store.set("record", b"payload")
    assert store.get("record") == b"payload"

    store.delete("record")
    assert store.get("record") is None
    store.delete("record")


def test_sqlite_store_creates_parent_dirs(tmp_path):
    db_path = tmp_path / "nested" / "state.db"
    store = SQLiteKeyValueStore(db_path)
    try:
        assert db_path.exists()
    finally:
        store.close()


def test_sqlite_store_overwrites(tmp_path):
    store = SQLiteKeyValueStore(tmp_path / "state.db")
    try:
        store.set("record", b"first")
        store.set("record", b"second")
        assert store.get("record") == b"second"
    finally:
        store.close()


def test_sqlite_store_persists_across_instances(tmp_path):
    db_path = tmp_path / "state.db"
    first = SQLiteKeyValueStore(db_path)
    first.set("record", "café".encode("utf-8"))
    first.close()

    second = SQLiteKeyValueStore(db_path)
    try:
        assert second.get("record").decode("utf-8") == "café"
        second.delete("record")
        assert second.get("record") is None
    finally:
        second.close()
