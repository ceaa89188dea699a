"""Durable key/value slots mirrored between memory and a :class:`SlotBackend`.

Every read and write first checks the backend for a document other than the
one the slot last saw, so several processes sharing one medium never
overwrite each other with stale copies. Anything the backend hands back that
is missing, unparseable or of the wrong shape degrades to the slot's default.
Writes update memory first and then persist; a persistence failure is logged
and never reaches the caller.
"""

import logging
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from contentvault.database.base import SlotBackend
from contentvault.exceptions import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Update = Union[T, Callable[[T], T]]


class DurableSlot(Generic[T]):

    def __init__(self, backend: SlotBackend, key: str, default: T,
                 value_type: Any) -> None:
        self.backend = backend
        self.key = key
        self.default = default
        self._adapter: TypeAdapter = TypeAdapter(value_type)
        self._value: T = default
        self._raw: Optional[str] = None
        self._loaded = False
        self._subscribers: List[Callable[[T], None]] = []

    def read(self) -> T:
        self._sync()
        return self._value

    def write(self, update: Update) -> T:
        """Replace the value, or apply ``update(previous)`` when given a callable.

        The slot is re-synced with the backend first, so an update never lands
        on a copy another process has since replaced.
        """
        previous = self.read()
        value = update(previous) if callable(update) else update
        self._value = value
        self._persist(value)
        self._notify(value)
        return value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _sync(self) -> None:
        try:
            raw = self.backend.get(self.key)
        except StorageError as e:
            if not self._loaded:
                logger.warning(f"Could not read {self.key!r}, using default: {e}")
                self._value = self.default
                self._loaded = True
            return

        if self._loaded and raw == self._raw:
            return

        changed_elsewhere = self._loaded
        self._raw = raw
        self._value = self._parse(raw)
        self._loaded = True
        if changed_elsewhere:
            logger.debug(f"{self.key!r} changed in the backend, reloaded")
            self._notify(self._value)

    def _parse(self, raw: Optional[str]) -> T:
        if raw is None:
            return self.default

        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                f"Discarding malformed value for {self.key!r} "
                f"({e.error_count()} errors), using default")
            return self.default

    def _persist(self, value: T) -> None:
        try:
            raw = self._adapter.dump_json(value).decode("utf-8")
            self.backend.set(self.key, raw)
            self._raw = raw
        except (StorageError, ValueError) as e:
            logger.error(f"Failed to persist {self.key!r}: {e}")

    def _notify(self, value: T) -> None:
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Subscriber for {self.key!r} failed: {e}")


class PersistentStore:
    """Hands out one shared :class:`DurableSlot` per key."""

    def __init__(self, backend: SlotBackend) -> None:
        self.backend = backend
        self._slots: Dict[str, DurableSlot] = {}

    def slot(self, key: str, default: T, value_type: Optional[Any] = None) -> DurableSlot[T]:
        existing = self._slots.get(key)
        if existing is not None:
            return existing

        slot = DurableSlot(self.backend, key, default,
                           value_type if value_type is not None else type(default))
        self._slots[key] = slot
        return slot

    def read(self, key: str, default: T, value_type: Optional[Any] = None) -> T:
        return self.slot(key, default, value_type).read()

    def write(self, key: str, update: Update) -> Any:
        """Write through the slot for ``key``.

        A plain value opens the slot on demand. A callable needs a previous
        value, so on a slot that was never opened it is logged and ignored.
        """
        slot = self._slots.get(key)
        if slot is None:
            if callable(update):
                logger.error(f"Ignoring update for {key!r}: slot has not been opened")
                return None
            slot = self.slot(key, update)
        return slot.write(update)

    def close(self) -> None:
        self.backend.close()
