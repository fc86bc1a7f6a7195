from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sitecontent.domain.page_name import normalize_page_name

STORAGE_KEY = "websiteContentUpdate"
MESSAGE_TYPE = "CONTENT_UPDATE"
GLOBAL_PAGE = "global"


class MalformedEvent(ValueError):
    pass


def now_ms() -> int:
    return int(time.time() * 1000)


def page_key(page: Optional[str]) -> str:
    if page is not None and str(page).strip().lower() == GLOBAL_PAGE:
        return GLOBAL_PAGE
    return normalize_page_name(page)


@dataclass(frozen=True)
class ContentUpdateEvent:
    """Notice that a page's content changed. Never persisted."""

    page: str
    payload: Optional[Any] = None
    timestamp: Optional[int] = None  # epoch milliseconds

    @property
    def is_global(self) -> bool:
        return self.page == GLOBAL_PAGE

    @property
    def dedupe_key(self):
        """None for events without a timestamp, which cannot be told apart."""
        if self.timestamp is None:
            return None
        return (self.page, self.timestamp)

    def age_ms(self, now: int) -> Optional[int]:
        if self.timestamp is None:
            return None
        return now - self.timestamp

    def to_wire(self) -> Dict[str, Any]:
        return {"page": self.page, "content": self.payload, "timestamp": self.timestamp}

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False)

    @classmethod
    def from_wire(cls, data: Any) -> "ContentUpdateEvent":
        if not isinstance(data, dict) or not data.get("page"):
            raise MalformedEvent("Invalid update data: missing page")

        timestamp = data.get("timestamp")
        if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, (int, float))):
            raise MalformedEvent(f"Invalid update timestamp: {timestamp!r}")

        return cls(
            page=page_key(data["page"]),
            payload=data.get("content"),
            timestamp=int(timestamp) if timestamp is not None else None,
        )

    @classmethod
    def from_json(cls, raw: str) -> "ContentUpdateEvent":
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            raise MalformedEvent(f"Unparseable update data: {exc}") from exc
        return cls.from_wire(data)
