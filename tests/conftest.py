from typing import Dict, Optional

import pytest

from contentvault.database import MemoryBackend
from contentvault.services import ContentVault, PersistentStore


class FakeRedisClient:
    """Just enough of redis.Redis for RedisManager."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.closed = False

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> PersistentStore:
    return PersistentStore(backend)


@pytest.fixture
def vault(store: PersistentStore) -> ContentVault:
    return ContentVault(store)


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()
