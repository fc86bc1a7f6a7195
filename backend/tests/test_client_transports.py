"""Tests for sitecontent.client events, cache and transports."""

import json

import pytest

from sitecontent.client.cache import ClientContentCache
from sitecontent.client.events import (
    MESSAGE_TYPE,
    STORAGE_KEY,
    ContentUpdateEvent,
    MalformedEvent,
)
from sitecontent.client.transports import (
    ContextWindow,
    SharedStorage,
    StorageChannel,
    WindowMessageChannel,
)


class TestContentUpdateEvent:
    """Tests for ContentUpdateEvent wire handling."""

    def test_wire_form(self):
        event = ContentUpdateEvent(page="about", payload=None, timestamp=1000)
        assert event.to_wire() == {"page": "about", "content": None, "timestamp": 1000}

    def test_from_wire_normalizes_page(self):
        event = ContentUpdateEvent.from_wire({"page": "About.html", "timestamp": 5})
        assert event.page == "about"

    def test_global_kept(self):
        assert ContentUpdateEvent.from_wire({"page": "GLOBAL"}).is_global

    def test_missing_page_rejected(self):
        with pytest.raises(MalformedEvent):
            ContentUpdateEvent.from_wire({"timestamp": 5})

    def test_bad_json_rejected(self):
        with pytest.raises(MalformedEvent):
            ContentUpdateEvent.from_json("{not json")

    def test_bad_timestamp_rejected(self):
        with pytest.raises(MalformedEvent):
            ContentUpdateEvent.from_wire({"page": "home", "timestamp": "yesterday"})

    def test_age(self):
        assert ContentUpdateEvent("home", timestamp=1000).age_ms(4000) == 3000
        assert ContentUpdateEvent("home").age_ms(4000) is None


class TestClientContentCache:
    """Tests for ClientContentCache."""

    def test_keys_normalized(self):
        cache = ClientContentCache(clock=lambda: 0)
        cache.set("index.html", [{"sectionId": "hero"}])
        assert cache.get("/") == [{"sectionId": "hero"}]
        assert "home" in cache

    def test_invalidate(self):
        cache = ClientContentCache(clock=lambda: 0)
        cache.set("about", [])
        assert cache.invalidate("About.html")
        assert not cache.invalidate("about")
        assert cache.get("about") is None

    def test_invalidate_all(self):
        cache = ClientContentCache(clock=lambda: 0)
        cache.set("about", [])
        cache.set("books", [])
        assert cache.invalidate_all() == 2
        assert len(cache) == 0

    def test_pages_sorted(self):
        cache = ClientContentCache(clock=lambda: 0)
        cache.set("books", [])
        cache.set("about", [])
        assert cache.pages() == ["about", "books"]


class TestSharedStorage:
    """Tests for SharedStorage."""

    def test_writer_not_notified(self):
        storage = SharedStorage()
        seen = {"a": [], "b": []}
        storage.add_listener("a", seen["a"].append)
        storage.add_listener("b", seen["b"].append)

        storage.set_item("k", "v", source="a")

        assert seen["a"] == []
        assert [(e.key, e.old_value, e.new_value) for e in seen["b"]] == [("k", None, "v")]

    def test_same_value_not_dispatched(self):
        storage = SharedStorage()
        seen = []
        storage.add_listener("b", seen.append)
        storage.set_item("k", "v", source="a")
        storage.set_item("k", "v", source="a")
        assert len(seen) == 1

    def test_failing_listener_isolated(self):
        storage = SharedStorage()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        storage.add_listener("b", broken)
        storage.add_listener("c", seen.append)
        storage.set_item("k", "v", source="a")
        assert len(seen) == 1

    def test_remove_listener(self):
        storage = SharedStorage()
        seen = []
        remove = storage.add_listener("b", seen.append)
        remove()
        storage.set_item("k", "v", source="a")
        assert seen == []


class TestStorageChannel:
    """Tests for StorageChannel."""

    def test_publish_reaches_other_context(self):
        storage = SharedStorage()
        editor = StorageChannel(storage, "editor")
        viewer = StorageChannel(storage, "viewer")
        received = []
        viewer.subscribe(received.append)

        editor.publish(ContentUpdateEvent("about", timestamp=10))

        assert received == [ContentUpdateEvent("about", timestamp=10)]
        assert json.loads(storage.get_item(STORAGE_KEY))["page"] == "about"

    def test_other_keys_ignored(self):
        storage = SharedStorage()
        received = []
        StorageChannel(storage, "viewer").subscribe(received.append)
        storage.set_item("theme", "dark", source="editor")
        assert received == []

    def test_malformed_value_ignored(self):
        storage = SharedStorage()
        received = []
        StorageChannel(storage, "viewer").subscribe(received.append)
        storage.set_item(STORAGE_KEY, "{broken", source="editor")
        assert received == []

    def test_read_and_clear_pending(self):
        storage = SharedStorage()
        StorageChannel(storage, "editor").publish(ContentUpdateEvent("books", timestamp=7))
        viewer = StorageChannel(storage, "viewer")

        assert viewer.read_pending() == ContentUpdateEvent("books", timestamp=7)
        viewer.clear_pending()
        assert viewer.read_pending() is None

    def test_corrupt_pending_cleared(self):
        storage = SharedStorage()
        storage.set_item(STORAGE_KEY, "garbage")
        assert StorageChannel(storage, "viewer").read_pending() is None
        assert storage.get_item(STORAGE_KEY) is None


class TestWindowMessageChannel:
    """Tests for WindowMessageChannel."""

    def test_publish_to_linked_windows(self):
        opener = ContextWindow("admin")
        site = ContextWindow("site")
        opener.link(site)
        received = []
        WindowMessageChannel(site).subscribe(received.append)

        WindowMessageChannel(opener).publish(ContentUpdateEvent("home", timestamp=3))

        assert received == [ContentUpdateEvent("home", timestamp=3)]

    def test_link_is_bidirectional(self):
        opener = ContextWindow("admin")
        frame = ContextWindow("preview")
        frame.link(opener)
        assert opener in frame.peers and frame in opener.peers

    def test_other_message_types_ignored(self):
        opener = ContextWindow("admin")
        site = ContextWindow("site")
        opener.link(site)
        received = []
        WindowMessageChannel(site).subscribe(received.append)

        opener.post_message({"type": "RESIZE", "page": "home"}, site)
        opener.post_message("plain text", site)
        assert received == []

    def test_foreign_origin_ignored(self):
        stranger = ContextWindow("ad", origin="https://ads.example")
        site = ContextWindow("site")
        received = []
        WindowMessageChannel(site).subscribe(received.append)

        stranger.post_message({"type": MESSAGE_TYPE, "page": "home", "timestamp": 1}, site)
        assert received == []
