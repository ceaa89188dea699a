"""
Storage backends for contentvault.

Each backend holds one serialized document per durable slot key.
"""

from contentvault.database.base import MemoryBackend, SlotBackend
from contentvault.database.file_manager import FileBackend
from contentvault.database.redis_manager import RedisManager

__all__ = [
    'FileBackend',
    'MemoryBackend',
    'RedisManager',
    'SlotBackend',
]
