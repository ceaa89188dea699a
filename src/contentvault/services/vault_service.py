import asyncio
import logging
from concurrent.futures import Executor
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Callable, Iterator, List, Optional

from contentvault.clipboard.base import CaptureEvent
from contentvault.models import ContentItem, Layout, Preferences
from contentvault.services.ingestion import IngestionPipeline, IngestResult
from contentvault.services.persistent_store import PersistentStore
from contentvault.services.search import filter_items

logger = logging.getLogger(__name__)

ITEMS_KEY = "content-vault-items"
QUERY_KEY = "content-vault-search"
PREFERENCES_KEY = "content-vault-preferences"


class ContentVault:
    """Owns the item collection, the search query and the preferences.

    Everything else (renderers, the HTTP adapter, the CLI) goes through the
    public methods here and never touches the slots directly.
    """

    def __init__(self, store: PersistentStore,
                 executor: Optional[Executor] = None) -> None:
        self.store = store
        self._items = store.slot(ITEMS_KEY, [], List[ContentItem])
        self._query = store.slot(QUERY_KEY, "", str)
        self._preferences = store.slot(PREFERENCES_KEY, Preferences(), Preferences)
        self.pipeline = IngestionPipeline(self._append, executor=executor)
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def items(self) -> List[ContentItem]:
        return filter_items(self._items.read(), self._query.read())

    @property
    def all_items(self) -> List[ContentItem]:
        return list(self._items.read())

    @property
    def query(self) -> str:
        return self._query.read()

    @property
    def preferences(self) -> Preferences:
        return self._preferences.read()

    def get(self, item_id: str) -> Optional[ContentItem]:
        for item in self._items.read():
            if item.id == item_id:
                return item
        return None

    def add_from_capture(self, event: CaptureEvent) -> "asyncio.Future[IngestResult]":
        return self.pipeline.submit(event)

    def remove(self, item_id: str) -> bool:
        if self.get(item_id) is None:
            return False

        self._items.write(
            lambda previous: [item for item in previous if item.id != item_id])
        logger.info(f"Removed {item_id}")
        return True

    def clear_all(self) -> None:
        if self._items.read():
            self._items.write([])
        if self._query.read():
            self._query.write("")
        logger.info("Cleared all items")

    def set_query(self, query: str) -> None:
        self._query.write(query)

    def update_preferences(self, **changes: Any) -> Preferences:
        def merge(previous: Preferences) -> Preferences:
            merged = replace(previous, **changes)
            return replace(merged, dark_mode=bool(merged.dark_mode),
                           layout=Layout(merged.layout))

        return self._preferences.write(merge)

    def on_change(self, callback: Callable[[List[ContentItem]], None]) -> Callable[[], None]:
        """Call ``callback`` with the visible subset whenever items or query change."""
        unsubscribers = [
            self._items.subscribe(lambda _: callback(self.items)),
            self._query.subscribe(lambda _: callback(self.items)),
        ]

        def unsubscribe() -> None:
            for stop in unsubscribers:
                stop()

        return unsubscribe

    def attach(self, source: Any) -> None:
        """Start receiving paste events from ``source`` (anything with ``subscribe``)."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = source.subscribe(self.add_from_capture)

    def detach(self) -> None:
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None

    def _append(self, item: ContentItem) -> None:
        self._items.write(lambda previous: [item, *previous])

    @contextmanager
    def attached(self, source: Any) -> Iterator["ContentVault"]:
        self.attach(source)
        try:
            yield self
        finally:
            self.detach()
