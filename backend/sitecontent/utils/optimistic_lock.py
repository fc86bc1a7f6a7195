from datetime import timezone
from typing import Optional

from dateutil.parser import ParserError, parse
from flask import request

from sitecontent.domain.invariants.exceptions import EditConflict, InvariantViolation

HEADER = "If-Unmodified-Since"


def as_utc(ts):
    """Stored timestamps come back naive from some backends; they are UTC."""
    return ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)


def client_timestamp() -> Optional[object]:
    raw = request.headers.get(HEADER)
    if not raw:
        return None
    try:
        return as_utc(parse(raw))
    except (ParserError, ValueError, OverflowError) as exc:
        raise InvariantViolation(f"Invalid {HEADER} header") from exc


def enforce_optimistic_lock(section):
    """
    Reject an edit made against an outdated copy of a section.

    Creating a section, or sending no precondition, always passes.
    """
    seen_at = client_timestamp()
    if seen_at is None or section is None or section.updated_at is None:
        return

    if as_utc(section.updated_at) > seen_at:
        raise EditConflict(section.page_name, section.section_id)
