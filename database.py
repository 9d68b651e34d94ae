"""
Record Store

The whole marketplace lives in one serialized registry blob under a single
versioned key. Backends only move text in and out; RecordStore owns parsing,
validation and first-access seeding.

There is no locking: two processes sharing a key race and the last save wins.
"""
import os
from typing import Callable, Dict, Optional

import structlog
from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from schemas import Registry
from seed import build_seed_registry

logger = structlog.get_logger(__name__)

STORAGE_KEY = os.getenv("STORAGE_KEY", "pkmart_registry_v2")


class StorageError(Exception):
    """The persisted registry is corrupt or the backend is unavailable."""


# ---------------------- Backends ----------------------

class MemoryBackend:
    def __init__(self):
        self.data: Dict[str, str] = {}
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value


class FileBackend:
    """One JSON file per key inside data_dir."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.data_dir, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise StorageError(f"{path} is not valid UTF-8: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e


class MongoBackend:
    """Stores each key as {"_id": key, "payload": text} in one collection."""

    def __init__(self, collection):
        self.collection = collection

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise StorageError(f"Database error: {str(e)[:100]}") from e
        return doc.get("payload") if doc else None

    def set(self, key: str, value: str) -> None:
        try:
            self.collection.replace_one({"_id": key}, {"_id": key, "payload": value}, upsert=True)
        except PyMongoError as e:
            raise StorageError(f"Database error: {str(e)[:100]}") from e


# ---------------------- Record Store ----------------------

class RecordStore:
    def __init__(self, backend, key: str = STORAGE_KEY, seed: Callable[[], Registry] = build_seed_registry):
        self.backend = backend
        self.key = key
        self.seed = seed

    def load(self) -> Registry:
        raw = self.backend.get(self.key)
        if raw is None:
            registry = self.seed()
            self.save(registry)
            logger.info("registry_seeded", key=self.key, shops=len(registry.shops), products=len(registry.products))
            return registry
        try:
            return Registry.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Stored registry under {self.key!r} is corrupt: {e}") from e

    def save(self, registry: Registry) -> None:
        self.backend.set(self.key, registry.model_dump_json())


# ---------------------- Configuration ----------------------

def get_db():
    database_url = os.getenv("DATABASE_URL")
    database_name = os.getenv("DATABASE_NAME")
    if not database_url or not database_name:
        return None
    client = MongoClient(database_url, serverSelectionTimeoutMS=5000)
    return client[database_name]


db = get_db()


def get_record_store() -> RecordStore:
    backend_name = os.getenv("STORAGE_BACKEND", "mongo" if db is not None else "file")
    if backend_name == "mongo" and db is not None:
        backend = MongoBackend(db["registry"])
    elif backend_name == "memory":
        backend = MemoryBackend()
    else:
        backend = FileBackend(os.getenv("DATA_DIR", "data"))
    logger.info("record_store_selected", backend=type(backend).__name__, key=STORAGE_KEY)
    return RecordStore(backend)
