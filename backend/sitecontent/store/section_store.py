from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from sitecontent.extensions import db
from sitecontent.models.section import Section
from sitecontent.domain.invariants.exceptions import InvariantViolation, PersistenceFailure
from sitecontent.domain.invariants.section import assert_section, assert_section_identity
from sitecontent.utils.audit import log_action
from sitecontent.utils.transaction import transactional

logger = logging.getLogger(__name__)

OVERWRITE = "overwrite"
MERGE = "merge"
RESEED_POLICIES = (OVERWRITE, MERGE)

EDITABLE_FIELDS = (
    "section_title",
    "content_html",
    "content_translated",
    "order",
    "layout",
    "is_active",
    "is_visible",
    "section_metadata",
)

# concurrent reseeds of the same page may collide on the unique key once
BULK_WRITE_ATTEMPTS = 2


def _as_record(section) -> Dict[str, Any]:
    if hasattr(section, "to_record"):
        return section.to_record()
    return dict(section)


class SectionStore:
    """
    Persistence for Section rows keyed by (page_name, section_id).

    Reads never mutate. Bulk writes are full page overwrites by default;
    single writes are upserts and never produce duplicate identities.
    """

    def __init__(self, reseed_policy: str = OVERWRITE):
        if reseed_policy not in RESEED_POLICIES:
            raise ValueError(f"Unknown reseed policy '{reseed_policy}'")
        self.reseed_policy = reseed_policy

    # ------------------------
    # Reads
    # ------------------------

    def _page_query(self, page: str, include_inactive: bool = False):
        query = Section.query.filter_by(page_name=page)
        if not include_inactive:
            query = query.filter_by(is_active=True, is_visible=True)
        return query

    def get_sections(self, page: str, include_inactive: bool = False) -> List[Section]:
        return (
            self._page_query(page, include_inactive)
            .order_by(Section.order.asc(), Section.section_id.asc())
            .all()
        )

    def get_section(self, page: str, section_id: str, include_inactive: bool = False) -> Optional[Section]:
        return self._page_query(page, include_inactive).filter_by(section_id=section_id).first()

    def count_documents(self, **filters) -> int:
        return Section.query.filter_by(**filters).count()

    def list_pages(self) -> List[Tuple[str, int]]:
        rows = (
            db.session.query(Section.page_name, db.func.count(Section.id))
            .group_by(Section.page_name)
            .order_by(Section.page_name.asc())
            .all()
        )
        return [(name, count) for name, count in rows]

    # ------------------------
    # Bulk writes
    # ------------------------

    def upsert_many(
        self,
        page: str,
        sections: Iterable[Any],
        *,
        policy: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> int:
        """
        Persist a freshly extracted set of sections for a page.

        overwrite: every existing row for the page is deleted and the set
        is inserted in the same transaction.
        merge: rows are upserted one by one; rows last written by an
        editor are left untouched, rows absent from the set survive.

        Returns the number of rows written.
        """
        policy = policy or self.reseed_policy
        records = [_as_record(s) for s in sections]

        for attempt in range(1, BULK_WRITE_ATTEMPTS + 1):
            try:
                with transactional(f"reseed {page}"):
                    if policy == MERGE:
                        written = self._merge(page, records)
                    else:
                        written = self._overwrite(page, records)

                    log_action(
                        action="page.reseed",
                        entity_type="page",
                        entity_id=page,
                        actor_id=actor_id,
                        payload={"policy": policy, "count": written},
                    )
                logger.info(f"[STORE] {page}: wrote {written} sections ({policy})")
                return written

            except IntegrityError as exc:
                logger.warning(f"[STORE] {page}: concurrent reseed collision (attempt {attempt}): {exc.orig}")
                if attempt == BULK_WRITE_ATTEMPTS:
                    raise PersistenceFailure(f"Could not persist sections for '{page}'") from exc

            except (SQLAlchemyError, InvariantViolation) as exc:
                logger.error(f"[STORE] {page}: bulk write failed: {exc}")
                raise PersistenceFailure(f"Could not persist sections for '{page}': {exc}") from exc

        return 0

    def _overwrite(self, page: str, records: List[Dict[str, Any]]) -> int:
        deleted = Section.query.filter_by(page_name=page).delete(synchronize_session=False)
        logger.debug(f"[STORE] {page}: cleared {deleted} existing sections")

        for record in records:
            section = self._new_section(page, record["section_id"])
            self._apply(section, record)
            assert_section(section)
            db.session.add(section)

        db.session.flush()
        return len(records)

    def _merge(self, page: str, records: List[Dict[str, Any]]) -> int:
        written = 0
        for record in records:
            section = self.get_section(page, record["section_id"], include_inactive=True)
            if section is not None and (section.section_metadata or {}).get("source") == "editor":
                continue

            if section is None:
                section = self._new_section(page, record["section_id"])
                db.session.add(section)

            self._apply(section, record)
            assert_section(section)
            written += 1

        db.session.flush()
        return written

    @staticmethod
    def _new_section(page: str, section_id: str) -> Section:
        section = Section()
        section.page_name = page
        section.section_id = section_id
        section.content_translated = ""
        section.order = 0
        section.layout = "default"
        section.is_active = True
        section.is_visible = True
        section.section_metadata = {}
        return section

    @staticmethod
    def _apply(section: Section, record: Dict[str, Any]) -> None:
        section.section_id = record["section_id"]
        for field in EDITABLE_FIELDS:
            if field in record and record[field] is not None:
                setattr(section, field, record[field])
        if section.section_metadata is None:
            section.section_metadata = {}

    # ------------------------
    # Single-section writes
    # ------------------------

    def update_or_create(
        self,
        page: str,
        section_id: str,
        patch: Dict[str, Any],
        *,
        actor_id: Optional[str] = None,
    ) -> Tuple[Section, bool]:
        """
        Upsert one section by (page, section_id).

        Returns (section, created). A concurrent insert of the same
        identity surfaces as an IntegrityError; the write is then replayed
        as an update of the row the other writer created.
        """
        assert_section_identity(page, section_id)
        patch = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS}
        if not isinstance(patch.get("section_metadata") or {}, dict):
            raise InvariantViolation("Section metadata must be an object.")

        for attempt in range(1, BULK_WRITE_ATTEMPTS + 1):
            try:
                return self._upsert_once(page, section_id, patch, actor_id)
            except IntegrityError as exc:
                logger.info(f"[STORE] {page}/{section_id}: lost insert race, retrying as update")
                if attempt == BULK_WRITE_ATTEMPTS:
                    raise PersistenceFailure(f"Could not save section '{section_id}'") from exc
            except SQLAlchemyError as exc:
                logger.error(f"[STORE] {page}/{section_id}: write failed: {exc}")
                raise PersistenceFailure(f"Could not save section '{section_id}': {exc}") from exc

        raise PersistenceFailure(f"Could not save section '{section_id}'")

    def _upsert_once(self, page, section_id, patch, actor_id) -> Tuple[Section, bool]:
        with transactional(f"upsert {page}/{section_id}"):
            section = self.get_section(page, section_id, include_inactive=True)
            created = section is None

            if created:
                section = self._new_section(page, section_id)
                section.created_by = actor_id
                if "order" not in patch:
                    section.order = self._next_order(page)
                db.session.add(section)

            changed_fields = []
            for field, value in patch.items():
                if field == "section_metadata":
                    value = {**(section.section_metadata or {}), **(value or {})}
                if getattr(section, field) != value:
                    setattr(section, field, value)
                    changed_fields.append(field)

            metadata = dict(section.section_metadata or {})
            metadata["source"] = "editor"
            if "content_html" in patch:
                metadata.pop("isFallback", None)
                metadata.pop("language", None)
            section.section_metadata = metadata
            section.updated_by = actor_id

            assert_section(section)
            db.session.flush()

            log_action(
                action="section.upsert",
                entity_type="section",
                entity_id=section.id,
                actor_id=actor_id,
                payload={
                    "page": page,
                    "section_id": section_id,
                    "created": created,
                    "fields": changed_fields,
                },
            )

        return section, created

    def _next_order(self, page: str) -> int:
        max_order = (
            db.session.query(db.func.max(Section.order))
            .filter_by(page_name=page)
            .scalar()
        )
        return 0 if max_order is None else max_order + 1

    def delete_section(self, page: str, section_id: str, *, actor_id: Optional[str] = None) -> bool:
        section = self.get_section(page, section_id, include_inactive=True)
        if section is None:
            return False

        try:
            with transactional(f"delete {page}/{section_id}"):
                db.session.delete(section)
                log_action(
                    action="section.delete",
                    entity_type="section",
                    entity_id=section.id,
                    actor_id=actor_id,
                    payload={"page": page, "section_id": section_id},
                )
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Could not delete section '{section_id}': {exc}") from exc
        return True

    def reorder(self, page: str, orders: Iterable[Dict[str, Any]], *, actor_id: Optional[str] = None) -> List[Section]:
        """Apply [{"sectionId": ..., "order": ...}] to the page's sections."""
        sections = {s.section_id: s for s in self.get_sections(page, include_inactive=True)}
        moved = 0

        try:
            with transactional(f"reorder {page}"):
                for item in orders:
                    section = sections.get(item.get("sectionId"))
                    order = item.get("order")
                    if section is None:
                        continue
                    if not isinstance(order, int) or isinstance(order, bool):
                        raise InvariantViolation("Section order must be an integer.")
                    section.order = order
                    section.updated_by = actor_id
                    moved += 1

                log_action(
                    action="section.reorder",
                    entity_type="page",
                    entity_id=page,
                    actor_id=actor_id,
                    payload={"count": moved},
                )
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Could not reorder sections for '{page}': {exc}") from exc

        return self.get_sections(page, include_inactive=True)
