from typing import Any, Dict, List, Optional, Tuple

from sitecontent.domain.invariants.exceptions import InvariantViolation, SectionNotFound
from sitecontent.domain.page_name import normalize_page_name
from sitecontent.models.section import Section
from sitecontent.store.section_store import SectionStore

# request payload key -> column
PAYLOAD_FIELDS = {
    "sectionTitle": "section_title",
    "contentHtml": "content_html",
    "contentTranslated": "content_translated",
    "contentTamil": "content_translated",
    "order": "order",
    "layout": "layout",
    "isActive": "is_active",
    "isVisible": "is_visible",
    "metadata": "section_metadata",
}

BOOLEAN_FIELDS = {"is_active", "is_visible"}


def patch_from_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate an editor payload into a column patch, dropping unknown keys."""
    patch: Dict[str, Any] = {}
    for key, column in PAYLOAD_FIELDS.items():
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if column in BOOLEAN_FIELDS and not isinstance(value, bool):
            raise InvariantViolation(f"'{key}' must be a boolean.")
        if column == "section_metadata" and not isinstance(value, dict):
            raise InvariantViolation(f"'{key}' must be an object.")
        patch[column] = value
    return patch


def upsert_section(
    *,
    store: SectionStore,
    page: str,
    section_id: str,
    actor_id: Optional[str],
    data: Dict[str, Any],
) -> Tuple[Section, bool]:
    """
    Create or update one section from an editor payload.

    contentHtml is mandatory, as in every direct edit.
    """
    if not data.get("contentHtml"):
        raise InvariantViolation("Content HTML is required")

    return store.update_or_create(
        normalize_page_name(page),
        section_id,
        patch_from_payload(data),
        actor_id=actor_id,
    )


def delete_section(*, store: SectionStore, page: str, section_id: str, actor_id: Optional[str]) -> None:
    page = normalize_page_name(page)
    if not store.delete_section(page, section_id, actor_id=actor_id):
        raise SectionNotFound(page, section_id)


def reorder_sections(
    *,
    store: SectionStore,
    page: str,
    actor_id: Optional[str],
    data: Any,
) -> List[Section]:
    orders = data.get("sectionOrders") if isinstance(data, dict) else data
    if not isinstance(orders, list) or not all(isinstance(item, dict) for item in orders):
        raise InvariantViolation("Section orders must be an array of {sectionId, order}")

    return store.reorder(normalize_page_name(page), orders, actor_id=actor_id)
