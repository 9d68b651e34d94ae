import os

os.environ.setdefault("STORAGE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from database import MemoryBackend, RecordStore
from registry import RegistryService


def failing_generator(prompt, schema):
    raise RuntimeError("model unavailable")


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return RecordStore(backend, key="test_registry")


@pytest.fixture
def registry(store):
    return RegistryService(store, allow_otp_override=True)


@pytest.fixture
def client(registry):
    import main

    main.app.dependency_overrides[main.get_registry] = lambda: registry
    main.app.dependency_overrides[main.get_text_generator] = lambda: failing_generator
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
