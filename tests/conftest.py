import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# No MongoDB in tests
os.environ.setdefault("ANIME_STORE_BACKEND", "memory")

from anime_api.storage.memory import MemoryAnimeStore  # noqa: E402

SEED_NAMES = ["alex", "barbara", "carlos", "daniel"]


@pytest.fixture
def store() -> MemoryAnimeStore:
    return MemoryAnimeStore(SEED_NAMES)


@pytest.fixture
def client(store: MemoryAnimeStore) -> Generator[TestClient, None, None]:
    from anime_api.deps import get_store
    from anime_api.main import app

    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
