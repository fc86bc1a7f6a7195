from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime
from typing import Any, List, Optional, Tuple, TypedDict

from sqlalchemy.sql import and_, or_
from werkzeug.exceptions import BadRequest

MAX_LIMIT = 100


class CursorMeta(TypedDict):
    has_more: bool
    next_cursor: Optional[str]


def encode_cursor(created_at: datetime, row_id: str) -> str:
    """Opaque token for the position just after (created_at, row_id)."""
    raw = json.dumps({"created_at": created_at.isoformat(), "id": row_id})
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    try:
        data = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
        return datetime.fromisoformat(data["created_at"]), str(data["id"])
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise BadRequest("Invalid cursor") from exc


def paginate_cursor(query, *, model, cursor: Optional[str], limit: int) -> Tuple[List[Any], CursorMeta]:
    """
    Newest-first keyset pagination over (created_at, id).

    One extra row is fetched to tell whether another page exists.
    """
    if limit <= 0 or limit > MAX_LIMIT:
        raise BadRequest(f"Limit must be between 1 and {MAX_LIMIT}")

    if cursor:
        created_at, row_id = decode_cursor(cursor)
        query = query.filter(
            or_(
                model.created_at < created_at,
                and_(model.created_at == created_at, model.id < row_id),
            )
        )

    rows = query.order_by(model.created_at.desc(), model.id.desc()).limit(limit + 1).all()
    items, has_more = rows[:limit], len(rows) > limit

    next_cursor = encode_cursor(items[-1].created_at, items[-1].id) if has_more else None
    return items, {"has_more": has_more, "next_cursor": next_cursor}
