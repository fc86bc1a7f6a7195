"""
Cross-context propagation of content updates.

An editor context publishes a ContentUpdateEvent after a write; every
other open context of the site receives it over one or more channels,
drops its cached copy of the page and, when the page is on screen,
re-fetches it. An event that carries the page's sections is applied
to the cache directly. Delivery is best effort.
"""
from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .cache import ClientContentCache
from .events import GLOBAL_PAGE, ContentUpdateEvent, now_ms, page_key
from .http import ContentFetcher, NetworkError
from .transports import BroadcastChannel

logger = logging.getLogger(__name__)

STALE_AFTER_MS = 30_000
REPLAY_WINDOW_MS = 5_000
NOTICE_TTL_MS = 3_000
RECENT_EVENTS = 32

# cache provenance for sections that arrived inside an update event
PUSHED = "pushed"

REFRESH_FAILED_MESSAGE = "Failed to apply content update. Please refresh the page."


class Notifier(Protocol):
    def info(self, message: str) -> None: ...

    def error(self, message: str, action: Optional[str] = None) -> None: ...


@dataclass
class Notice:
    id: int
    level: str
    message: str
    action: Optional[str]
    expires_at: Optional[int]


class NotificationCenter:
    """
    On-screen notices for one context.

    Info notices disappear after a few seconds; error notices stay until
    dismissed and may offer an action such as a manual refresh.
    """

    def __init__(self, clock=now_ms, ttl_ms: int = NOTICE_TTL_MS):
        self._clock = clock
        self.ttl_ms = ttl_ms
        self._notices: List[Notice] = []
        self._ids = itertools.count(1)

    def info(self, message: str) -> None:
        logger.info(f"[SYNC] {message}")
        self._notices.append(
            Notice(next(self._ids), "info", message, None, self._clock() + self.ttl_ms)
        )

    def error(self, message: str, action: Optional[str] = "refresh") -> None:
        logger.error(f"[SYNC] {message}")
        self._notices.append(Notice(next(self._ids), "error", message, action, None))

    def active(self) -> List[Notice]:
        now = self._clock()
        self._notices = [n for n in self._notices if n.expires_at is None or n.expires_at > now]
        return list(self._notices)

    def dismiss(self, notice_id: int) -> bool:
        before = len(self._notices)
        self._notices = [n for n in self._notices if n.id != notice_id]
        return len(self._notices) != before


class UpdatePropagationBus:
    def __init__(
        self,
        cache: ClientContentCache,
        fetcher: ContentFetcher,
        channels: Sequence[BroadcastChannel],
        notifier: Optional[Notifier] = None,
        clock: Callable[[], int] = now_ms,
        current_page: Optional[str] = None,
        stale_after_ms: int = STALE_AFTER_MS,
        replay_window_ms: int = REPLAY_WINDOW_MS,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.channels = list(channels)
        self.notifier = notifier or NotificationCenter(clock=clock)
        self.clock = clock
        self.current_page = page_key(current_page) if current_page else None
        self.stale_after_ms = stale_after_ms
        self.replay_window_ms = replay_window_ms

        self._unsubscribers = []
        # an event published on several channels reaches us more than once
        self._recent = deque(maxlen=RECENT_EVENTS)

    # ------------------------
    # Lifecycle
    # ------------------------

    def start(self) -> None:
        if self._unsubscribers:
            return
        for channel in self.channels:
            self._unsubscribers.append(channel.subscribe(self.handle))
        self.check_pending()

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def navigate(self, page: str) -> None:
        self.current_page = page_key(page)

    def check_pending(self) -> None:
        """Replay an update written shortly before this context started."""
        for channel in self.channels:
            read_pending = getattr(channel, "read_pending", None)
            if read_pending is None:
                continue

            event = read_pending()
            if event is None:
                continue

            age = event.age_ms(self.clock())
            if age is not None and age < self.replay_window_ms:
                logger.info(f"[SYNC] replaying pending update for '{event.page}' ({age} ms old)")
                self.handle(event)
            else:
                logger.debug(f"[SYNC] clearing expired pending update for '{event.page}'")
                channel.clear_pending()

    # ------------------------
    # Events
    # ------------------------

    def publish(self, page: str, content: Optional[Any] = None) -> ContentUpdateEvent:
        event = ContentUpdateEvent(page=page_key(page), payload=content, timestamp=self.clock())
        self._recent.append(event.dedupe_key)
        for channel in self.channels:
            channel.publish(event)
        logger.info(f"[SYNC] published update for '{event.page}'")
        return event

    def handle(self, event: ContentUpdateEvent) -> bool:
        """Apply one update. Returns True when the context acted on it."""
        key = event.dedupe_key
        if key is not None and key in self._recent:
            return False

        age = event.age_ms(self.clock())
        if age is not None and age > self.stale_after_ms:
            logger.debug(f"[SYNC] ignoring stale update for '{event.page}' ({age} ms old)")
            return False

        if key is not None:
            self._recent.append(key)

        if event.is_global:
            dropped = self.cache.invalidate_all()
            logger.info(f"[SYNC] global update, dropped {dropped} cached pages")
        elif _pushed_sections(event):
            # sections travel with the event
            self.cache.set(event.page, event.payload, provenance=PUSHED)
            logger.info(f"[SYNC] applied {len(event.payload)} pushed sections for '{event.page}'")
            if event.page == self.current_page:
                self.notifier.info(f"Content updated: {event.page}")
            return True
        else:
            self.cache.invalidate(event.page)

        target = self._refresh_target(event)
        if target is None:
            return True

        try:
            result = self.fetcher.fetch_sections(target)
        except NetworkError as exc:
            logger.warning(f"[SYNC] refresh of '{target}' failed: {exc}")
            self.notifier.error(REFRESH_FAILED_MESSAGE, action="refresh")
            return False

        self.cache.set(target, result.sections, provenance=result.provenance)
        self.notifier.info(f"Content updated: {target}")
        return True

    def _refresh_target(self, event: ContentUpdateEvent) -> Optional[str]:
        if self.current_page is None:
            return None
        if event.is_global or event.page == self.current_page:
            return self.current_page
        return None

    # ------------------------
    # Reads
    # ------------------------

    def load(self, page: str) -> List[Dict[str, Any]]:
        """Sections for a page, served from cache when present."""
        cached = self.cache.get(page)
        if cached is not None:
            return cached

        result = self.fetcher.fetch_sections(page)
        self.cache.set(page, result.sections, provenance=result.provenance)
        return result.sections


def _pushed_sections(event: ContentUpdateEvent) -> bool:
    payload = event.payload
    return isinstance(payload, list) and bool(payload) and all(isinstance(s, dict) for s in payload)
