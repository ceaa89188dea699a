from datetime import datetime, timezone
from typing import List

from contentvault.database import MemoryBackend
from contentvault.exceptions import StorageError
from contentvault.models import ContentItem, ContentType, Layout, Preferences
from contentvault.services import PersistentStore


class BrokenBackend(MemoryBackend):

    def get(self, key):
        raise StorageError("disk on fire")

    def set(self, key, value):
        raise StorageError("quota exceeded")


def _item(content: str, type: ContentType = ContentType.TEXT) -> ContentItem:
    return ContentItem(
        id=f"i_{content}",
        type=type,
        content=content,
        tags=("a", "b"),
        created_at=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
    )


def test_read_missing_key_returns_default(store):
    assert store.read("content-vault-search", "") == ""


def test_write_is_visible_to_next_read(store):
    store.slot("content-vault-search", "", str)
    store.write("content-vault-search", "hello")
    assert store.read("content-vault-search", "") == "hello"


def test_same_key_shares_one_slot(store):
    first = store.slot("k", "", str)
    second = store.slot("k", "other default", str)
    assert first is second

    first.write("x")
    assert second.read() == "x"


def test_callable_updates_chain_on_latest_value(store):
    slot = store.slot("counter", 0, int)
    slot.write(lambda n: n + 1)
    slot.write(lambda n: n + 1)
    slot.write(lambda n: n + 1)
    assert slot.read() == 3


def test_round_trip_after_restart(backend):
    items = [_item("newest", ContentType.LINK), _item("older")]
    PersistentStore(backend).slot("items", [], List[ContentItem]).write(items)

    reloaded = PersistentStore(backend).read("items", [], List[ContentItem])
    assert reloaded == items
    assert reloaded[0].tags == ("a", "b")
    assert reloaded[0].created_at == items[0].created_at


def test_preferences_round_trip(backend):
    PersistentStore(backend).slot("prefs", Preferences(), Preferences).write(
        Preferences(dark_mode=False, layout=Layout.LIST))

    assert PersistentStore(backend).read("prefs", Preferences(), Preferences) == Preferences(
        dark_mode=False, layout=Layout.LIST)


def test_unparseable_value_degrades_to_default():
    backend = MemoryBackend({"items": "{not json"})
    assert PersistentStore(backend).read("items", [], List[ContentItem]) == []


def test_wrong_shape_degrades_to_default():
    backend = MemoryBackend({
        "items": '[{"id": "i_1", "type": "video", "content": "x"}]',
        "search": '{"query": "x"}',
    })
    store = PersistentStore(backend)
    assert store.read("items", [], List[ContentItem]) == []
    assert store.read("search", "", str) == ""


def test_backend_read_failure_degrades_to_default():
    store = PersistentStore(BrokenBackend())
    assert store.read("search", "fallback", str) == "fallback"


def test_persist_failure_is_swallowed_and_memory_still_updates(caplog):
    store = PersistentStore(BrokenBackend())
    slot = store.slot("search", "", str)

    slot.write("kept in memory")

    assert slot.read() == "kept in memory"
    assert "Failed to persist" in caplog.text


def test_subscribers_see_every_write(store):
    seen = []
    slot = store.slot("search", "", str)
    unsubscribe = slot.subscribe(seen.append)

    slot.write("a")
    slot.write(lambda q: q + "b")
    unsubscribe()
    slot.write("c")

    assert seen == ["a", "ab"]


def test_write_to_unopened_key_opens_slot(store, backend):
    store.write("fresh", "value")
    assert store.read("fresh", "") == "value"
    assert backend.get("fresh") == '"value"'


def test_updater_on_unopened_key_is_ignored(store, backend, caplog):
    assert store.write("never-opened", lambda previous: previous + 1) is None
    assert "never-opened" not in backend.data
    assert "has not been opened" in caplog.text


def test_update_applies_to_value_written_by_another_store(backend):
    mine = PersistentStore(backend).slot("items", [], List[str])
    theirs = PersistentStore(backend).slot("items", [], List[str])

    mine.write(["a"])
    theirs.write([])
    mine.write(lambda previous: ["b", *previous])

    assert mine.read() == ["b"]
    assert PersistentStore(backend).read("items", [], List[str]) == ["b"]


def test_external_change_notifies_subscribers(backend):
    mine = PersistentStore(backend).slot("search", "", str)
    theirs = PersistentStore(backend).slot("search", "", str)
    seen = []
    mine.read()
    mine.subscribe(seen.append)

    theirs.write("elsewhere")

    assert mine.read() == "elsewhere"
    assert seen == ["elsewhere"]
