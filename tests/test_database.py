import json

import pytest

from database import FileBackend, MemoryBackend, MongoBackend, RecordStore, StorageError
from seed import SAMPLE_SELLERS, build_seed_registry


def test_first_load_seeds_and_persists(store, backend):
    registry = store.load()
    assert backend.writes == 1
    assert len(registry.shops) == len(SAMPLE_SELLERS)
    assert all(s.status == "active" and s.verified for s in registry.shops)
    assert registry.products


def test_second_load_does_not_reseed(store, backend):
    first = store.load()
    second = store.load()
    assert first == second
    assert backend.writes == 1


def test_save_overwrites_whole_blob(store, backend):
    registry = store.load()
    registry.products = registry.products[:1]
    store.save(registry)
    stored = json.loads(backend.get("test_registry"))
    assert len(stored["products"]) == 1
    assert set(stored) >= {"shops", "products", "orders"}


def test_undecodable_file_raises_storage_error(tmp_path):
    (tmp_path / "reg.json").write_bytes(b"\xff\xfe{bad")
    store = RecordStore(FileBackend(str(tmp_path)), key="reg")
    with pytest.raises(StorageError):
        store.load()
    assert (tmp_path / "reg.json").read_bytes() == b"\xff\xfe{bad"


def test_corrupt_json_raises_and_is_not_reset(backend):
    backend.set("k", "{not json")
    store = RecordStore(backend, key="k")
    with pytest.raises(StorageError):
        store.load()
    assert backend.get("k") == "{not json"


def test_wrong_layout_raises(backend):
    backend.set("k", json.dumps({"shops": "nope"}))
    with pytest.raises(StorageError):
        RecordStore(backend, key="k").load()


def test_legacy_sellers_field_is_accepted(backend):
    blob = build_seed_registry().model_dump()
    blob["sellers"] = [{"id": "old", "fullName": "Legacy"}]
    backend.set("k", json.dumps(blob))
    registry = RecordStore(backend, key="k").load()
    assert len(registry.shops) == len(SAMPLE_SELLERS)


def test_file_backend_round_trip(tmp_path):
    store = RecordStore(FileBackend(str(tmp_path)), key="reg")
    seeded = store.load()
    assert (tmp_path / "reg.json").exists()
    assert RecordStore(FileBackend(str(tmp_path)), key="reg").load() == seeded


class FakeCollection:
    def __init__(self):
        self.docs = {}

    def find_one(self, query):
        return self.docs.get(query["_id"])

    def replace_one(self, query, doc, upsert=False):
        self.docs[query["_id"]] = doc


def test_mongo_backend_stores_one_document_per_key():
    collection = FakeCollection()
    store = RecordStore(MongoBackend(collection), key="reg")
    store.load()
    assert list(collection.docs) == ["reg"]
    assert "payload" in collection.docs["reg"]


def test_memory_backend_missing_key():
    assert MemoryBackend().get("missing") is None
