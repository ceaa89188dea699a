from abc import ABC, abstractmethod
from typing import Dict, Optional


class SlotBackend(ABC):
    """Durable medium holding one serialized document per key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "SlotBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class MemoryBackend(SlotBackend):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
