from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .events import now_ms, page_key


@dataclass
class CacheEntry:
    sections: List[Dict[str, Any]]
    provenance: Optional[str]
    stored_at: int


class ClientContentCache:
    """
    Most recently resolved sections per page for one browsing context.

    Owned by a single context and mutated only from its event loop.
    """

    def __init__(self, clock=now_ms):
        self._entries: Dict[str, CacheEntry] = {}
        self._clock = clock

    def get(self, page) -> Optional[List[Dict[str, Any]]]:
        entry = self._entries.get(page_key(page))
        return entry.sections if entry else None

    def entry(self, page) -> Optional[CacheEntry]:
        return self._entries.get(page_key(page))

    def set(self, page, sections: List[Dict[str, Any]], provenance: Optional[str] = None) -> None:
        self._entries[page_key(page)] = CacheEntry(list(sections), provenance, self._clock())

    def invalidate(self, page) -> bool:
        return self._entries.pop(page_key(page), None) is not None

    def invalidate_all(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def pages(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, page) -> bool:
        return page_key(page) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
