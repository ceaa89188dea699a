from typing import Any, Optional

import redis

from contentvault.database.base import SlotBackend
from contentvault.exceptions import StorageError


class RedisManager(SlotBackend):

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, namespace: str = "contentvault",
                 client: Optional[Any] = None):
        self.namespace = namespace
        self.client = client if client is not None else redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            decode_responses=True
        )
        self._test_connection()

    def _test_connection(self):
        try:
            self.client.ping()
        except redis.RedisError as e:
            raise StorageError(f"Redis unavailable: {e}") from e

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(self._key(key))
        except redis.RedisError as e:
            raise StorageError(f"Redis read failed for {key}: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(self._key(key), value)
        except redis.RedisError as e:
            raise StorageError(f"Redis write failed for {key}: {e}") from e

    def close(self):
        self.client.close()
