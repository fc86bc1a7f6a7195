"""Tests for sitecontent.application.content.edit_section."""

import pytest

from sitecontent.application.content.edit_section import (
    delete_section,
    patch_from_payload,
    reorder_sections,
    upsert_section,
)
from sitecontent.domain.invariants.exceptions import InvariantViolation, SectionNotFound
from sitecontent.store.section_store import SectionStore


class TestPatchFromPayload:
    """Tests for patch_from_payload."""

    def test_maps_camel_case(self):
        patch = patch_from_payload({"sectionTitle": "T", "contentHtml": "<p>x</p>", "isVisible": False})
        assert patch == {"section_title": "T", "content_html": "<p>x</p>", "is_visible": False}

    def test_tamil_alias(self):
        assert patch_from_payload({"contentTamil": "<p>த</p>"}) == {"content_translated": "<p>த</p>"}

    def test_unknown_and_null_keys_dropped(self):
        assert patch_from_payload({"pageName": "x", "layout": None}) == {}

    def test_boolean_validated(self):
        with pytest.raises(InvariantViolation):
            patch_from_payload({"isActive": "yes"})

    def test_metadata_must_be_object(self):
        with pytest.raises(InvariantViolation):
            patch_from_payload({"contentHtml": "<p>x</p>", "metadata": "oops"})


class TestUseCases:
    """Tests for upsert_section, delete_section and reorder_sections."""

    def test_upsert_normalizes_page(self, app):
        section, created = upsert_section(
            store=SectionStore(), page="/Index.html", section_id="hero", actor_id="u1",
            data={"contentHtml": "<h1>Hi</h1>"},
        )
        assert created
        assert section.page_name == "home"

    def test_upsert_requires_content(self, app):
        with pytest.raises(InvariantViolation):
            upsert_section(store=SectionStore(), page="home", section_id="hero", actor_id=None, data={})

    def test_delete_missing(self, app):
        with pytest.raises(SectionNotFound):
            delete_section(store=SectionStore(), page="home", section_id="nope", actor_id=None)

    def test_reorder_accepts_bare_list(self, app):
        store = SectionStore()
        store.update_or_create("home", "a", {"content_html": "<p>a</p>"})
        store.update_or_create("home", "b", {"content_html": "<p>b</p>"})
        sections = reorder_sections(
            store=store, page="home", actor_id=None,
            data=[{"sectionId": "a", "order": 9}],
        )
        assert [s.section_id for s in sections] == ["b", "a"]

    def test_reorder_rejects_non_list(self, app):
        with pytest.raises(InvariantViolation):
            reorder_sections(store=SectionStore(), page="home", actor_id=None, data={"sectionOrders": 3})
