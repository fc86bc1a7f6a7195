"""
Channels that carry ContentUpdateEvents between browsing contexts.

Two transports are modelled: a shared key-value storage whose writes are
observed by every other same-origin context, and direct window messaging
between an opener and the windows or frames it is linked to.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from .events import MESSAGE_TYPE, STORAGE_KEY, ContentUpdateEvent, MalformedEvent

logger = logging.getLogger(__name__)

Handler = Callable[[ContentUpdateEvent], None]
Unsubscribe = Callable[[], None]


class BroadcastChannel(Protocol):
    def publish(self, event: ContentUpdateEvent) -> None: ...

    def subscribe(self, handler: Handler) -> Unsubscribe: ...


def _dispatch(listeners, payload, label):
    for listener in list(listeners):
        try:
            listener(payload)
        except Exception:
            # one failing listener must not starve the others
            logger.exception(f"[SYNC] {label} listener failed")


# ------------------------
# Shared storage
# ------------------------

@dataclass(frozen=True)
class StorageEvent:
    key: str
    old_value: Optional[str]
    new_value: Optional[str]


class SharedStorage:
    """Same-origin key-value store shared by every context of a site."""

    def __init__(self):
        self._items: Dict[str, str] = {}
        self._listeners: List[Tuple[str, Callable[[StorageEvent], None]]] = []

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str, *, source: Optional[str] = None) -> None:
        old = self._items.get(key)
        self._items[key] = value
        if old != value:
            self._notify(StorageEvent(key, old, value), source)

    def remove_item(self, key: str, *, source: Optional[str] = None) -> None:
        old = self._items.pop(key, None)
        if old is not None:
            self._notify(StorageEvent(key, old, None), source)

    def add_listener(self, context_id: str, callback: Callable[[StorageEvent], None]) -> Unsubscribe:
        entry = (context_id, callback)
        self._listeners.append(entry)

        def remove():
            if entry in self._listeners:
                self._listeners.remove(entry)

        return remove

    def _notify(self, event: StorageEvent, source: Optional[str]) -> None:
        # the writing context never observes its own write
        callbacks = [cb for ctx, cb in self._listeners if ctx != source]
        _dispatch(callbacks, event, "storage")


class StorageChannel:
    def __init__(self, storage: SharedStorage, context_id: str, key: str = STORAGE_KEY):
        self.storage = storage
        self.context_id = context_id
        self.key = key

    def publish(self, event: ContentUpdateEvent) -> None:
        self.storage.set_item(self.key, event.to_json(), source=self.context_id)

    def subscribe(self, handler: Handler) -> Unsubscribe:
        def on_storage(storage_event: StorageEvent):
            if storage_event.key != self.key or not storage_event.new_value:
                return
            try:
                event = ContentUpdateEvent.from_json(storage_event.new_value)
            except MalformedEvent as exc:
                logger.warning(f"[SYNC] ignoring malformed storage update: {exc}")
                return
            handler(event)

        return self.storage.add_listener(self.context_id, on_storage)

    def read_pending(self) -> Optional[ContentUpdateEvent]:
        """The last update written before this context started, if any."""
        raw = self.storage.get_item(self.key)
        if not raw:
            return None
        try:
            return ContentUpdateEvent.from_json(raw)
        except MalformedEvent as exc:
            logger.warning(f"[SYNC] discarding corrupt pending update: {exc}")
            self.clear_pending()
            return None

    def clear_pending(self) -> None:
        self.storage.remove_item(self.key, source=self.context_id)


# ------------------------
# Window messaging
# ------------------------

@dataclass(frozen=True)
class MessageEvent:
    data: Any
    origin: str
    source: "ContextWindow"


class ContextWindow:
    """A browsing context able to post messages to the windows linked to it."""

    def __init__(self, name: str, origin: str = "http://localhost"):
        self.name = name
        self.origin = origin
        self.peers: List["ContextWindow"] = []
        self._listeners: List[Callable[[MessageEvent], None]] = []

    def link(self, other: "ContextWindow") -> None:
        """Opener/opened or parent/embedded relation; messages flow both ways."""
        if other not in self.peers:
            self.peers.append(other)
        if self not in other.peers:
            other.peers.append(self)

    def post_message(self, data: Any, target: "ContextWindow") -> None:
        target._deliver(MessageEvent(data=data, origin=self.origin, source=self))

    def add_message_listener(self, callback: Callable[[MessageEvent], None]) -> Unsubscribe:
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def _deliver(self, message: MessageEvent) -> None:
        _dispatch(self._listeners, message, f"window '{self.name}'")

    def __repr__(self):
        return f"<ContextWindow {self.name}>"


class WindowMessageChannel:
    def __init__(self, window: ContextWindow):
        self.window = window

    def publish(self, event: ContentUpdateEvent) -> None:
        message = {"type": MESSAGE_TYPE, **event.to_wire()}
        for peer in list(self.window.peers):
            self.window.post_message(message, peer)

    def subscribe(self, handler: Handler) -> Unsubscribe:
        def on_message(message: MessageEvent):
            if message.origin != self.window.origin:
                return
            data = message.data
            if not isinstance(data, dict) or data.get("type") != MESSAGE_TYPE:
                return
            try:
                event = ContentUpdateEvent.from_wire(data)
            except MalformedEvent as exc:
                logger.warning(f"[SYNC] ignoring malformed window message: {exc}")
                return
            handler(event)

        return self.window.add_message_listener(on_message)
