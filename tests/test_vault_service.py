import asyncio

import pytest

from contentvault.clipboard import HTML, CaptureEvent, CapturedFile
from contentvault.database import FileBackend
from contentvault.models import ContentType, Layout, Preferences
from contentvault.services import ContentVault, PersistentStore
from contentvault.services.vault_service import ITEMS_KEY, QUERY_KEY


class FakeSource:

    def __init__(self):
        self.handlers = []

    def subscribe(self, handler):
        self.handlers.append(handler)
        return lambda: self.handlers.remove(handler)


def _add_texts(vault: ContentVault, *texts: str):
    async def scenario():
        return [await vault.add_from_capture(CaptureEvent.from_text(t)) for t in texts]

    return asyncio.run(scenario())


def test_items_are_newest_first(vault):
    _add_texts(vault, "first", "second", "third")
    assert [item.content for item in vault.all_items] == ["third", "second", "first"]


def test_items_survive_restart(vault, backend):
    results = _add_texts(vault, "one", "two")
    vault.set_query("on")

    restarted = ContentVault(PersistentStore(backend))

    assert restarted.all_items == vault.all_items
    assert restarted.all_items[0].id == results[1].item.id
    assert restarted.query == "on"
    assert [item.content for item in restarted.items] == ["one"]


def test_visible_items_follow_query(vault):
    _add_texts(vault, "hello", "goodbye")

    vault.set_query("ell")
    assert [item.content for item in vault.items] == ["hello"]

    vault.set_query("zzz")
    assert vault.items == []

    vault.set_query("")
    assert len(vault.items) == 2


def test_remove_twice_is_a_noop_the_second_time(vault):
    first, second = _add_texts(vault, "keep", "drop")

    assert vault.remove(second.item.id) is True
    assert vault.remove(second.item.id) is False
    assert [item.id for item in vault.all_items] == [first.item.id]


def test_remove_unknown_id(vault):
    _add_texts(vault, "x")
    seen = []
    vault.on_change(seen.append)

    assert vault.remove("i_missing") is False
    assert len(vault.all_items) == 1
    assert seen == []


def test_clear_all_empties_items_and_query(vault, backend):
    _add_texts(vault, "a", "b")
    vault.set_query("a")

    vault.clear_all()

    assert vault.all_items == []
    assert vault.query == ""
    assert backend.get(ITEMS_KEY) == "[]"
    assert backend.get(QUERY_KEY) == '""'


def test_clear_empty_collection(vault, backend):
    seen = []
    vault.on_change(seen.append)

    vault.clear_all()

    assert vault.all_items == []
    assert seen == []
    assert backend.data == {}


def test_get(vault):
    (result,) = _add_texts(vault, "x")
    assert vault.get(result.item.id) == result.item
    assert vault.get("i_missing") is None


def test_image_pending_while_other_events_processed(vault):
    event = CaptureEvent(representations={"image/png": ""},
                         files=(CapturedFile.from_bytes("image/png", b"png"),))

    async def scenario():
        old = await vault.add_from_capture(CaptureEvent.from_text("old"))
        pending = vault.add_from_capture(event)
        vault.remove(old.item.id)
        vault.set_query("image")
        text = await vault.add_from_capture(CaptureEvent(representations={HTML: "<p>later</p>"}))
        image = await pending
        return text, image

    text, image = asyncio.run(scenario())

    # the image finished after the later html capture, so it sits on top
    assert [item.id for item in vault.all_items] == [image.item.id, text.item.id]
    assert vault.all_items[0].created_at >= vault.all_items[1].created_at
    assert [item.type for item in vault.items] == [ContentType.IMAGE]


def test_preferences_defaults_and_update(vault, backend):
    assert vault.preferences == Preferences(dark_mode=True, layout=Layout.GRID)

    vault.update_preferences(layout="list")
    updated = vault.update_preferences(dark_mode=False)

    assert updated == Preferences(dark_mode=False, layout=Layout.LIST)
    assert ContentVault(PersistentStore(backend)).preferences == updated


def test_preferences_reject_unknown_layout(vault):
    with pytest.raises(ValueError):
        vault.update_preferences(layout="masonry")
    assert vault.preferences.layout is Layout.GRID


def test_on_change_reports_visible_items(vault):
    seen = []
    unsubscribe = vault.on_change(lambda items: seen.append([i.content for i in items]))

    _add_texts(vault, "alpha", "beta")
    vault.set_query("alp")
    unsubscribe()
    vault.set_query("")

    assert seen == [["alpha"], ["beta", "alpha"], ["alpha"]]


def test_attach_and_detach_are_symmetric(vault):
    source = FakeSource()

    with vault.attached(source):
        vault.attach(source)
        assert len(source.handlers) == 1

    assert source.handlers == []
    vault.detach()


def test_attached_source_events_are_ingested(vault):
    source = FakeSource()

    async def scenario():
        with vault.attached(source):
            for handler in list(source.handlers):
                await handler(CaptureEvent.from_text("pasted"))

    asyncio.run(scenario())
    assert [item.content for item in vault.all_items] == ["pasted"]


def test_two_vaults_on_one_directory_see_each_others_removals(tmp_path):
    first = ContentVault(PersistentStore(FileBackend(tmp_path)))
    second = ContentVault(PersistentStore(FileBackend(tmp_path)))

    (secret,) = _add_texts(first, "secret")
    assert second.remove(secret.item.id) is True
    assert first.all_items == []

    _add_texts(first, "next")

    reopened = ContentVault(PersistentStore(FileBackend(tmp_path)))
    assert [item.content for item in reopened.all_items] == ["next"]


def test_clear_in_one_vault_is_not_undone_by_another(tmp_path):
    first = ContentVault(PersistentStore(FileBackend(tmp_path)))
    second = ContentVault(PersistentStore(FileBackend(tmp_path)))

    _add_texts(first, "a", "b")
    second.clear_all()
    _add_texts(first, "c")

    reopened = ContentVault(PersistentStore(FileBackend(tmp_path)))
    assert [item.content for item in reopened.all_items] == ["c"]
