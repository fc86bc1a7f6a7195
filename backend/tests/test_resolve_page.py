"""Tests for sitecontent.application.content.resolve_page."""

import os

from sitecontent import create_app
from sitecontent.application.content.resolve_page import (
    FALLBACK,
    SCRAPED,
    STORED,
    ContentResolutionPipeline,
    pipeline_from_config,
)
from sitecontent.config import TestingConfig
from sitecontent.domain.invariants.exceptions import PersistenceFailure
from sitecontent.extraction.extractor import SectionExtractor
from sitecontent.normalizers.section import normalize_section
from sitecontent.store.section_store import MERGE, SectionStore
from sitecontent.utils.source_locator import SourceDocumentLocator


class CountingExtractor(SectionExtractor):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def extract(self, html, page="home", lang="en"):
        self.calls += 1
        return super().extract(html, page=page, lang=lang)


class FailingStore(SectionStore):
    def upsert_many(self, page, sections, *, policy=None, actor_id=None):
        raise PersistenceFailure("database unavailable")


class UpperTranslator:
    def translate(self, text):
        return text.upper()


class BrokenTranslator:
    def translate(self, text):
        raise RuntimeError("quota exceeded")


def _pipeline(source_dir, store=None, **kwargs):
    return ContentResolutionPipeline(
        store=store or SectionStore(),
        locator=SourceDocumentLocator([str(source_dir)]),
        **kwargs,
    )


class TestResolve:
    """Tests for ContentResolutionPipeline.resolve."""

    def test_projects_page_end_to_end(self, app, source_dir, projects_page):
        resolved = _pipeline(source_dir).resolve("projects.html")

        assert resolved.page == "projects"
        assert resolved.provenance == SCRAPED
        assert [s.order for s in resolved.sections] == [0, 1]
        assert [s.section_title for s in resolved.sections] == ["Our Projects", "Current Work"]
        assert SectionStore().count_documents(page_name="projects") == 2

    def test_second_resolve_served_from_store(self, app, source_dir, projects_page):
        extractor = CountingExtractor()
        pipeline = _pipeline(source_dir, extractor=extractor)

        first = pipeline.resolve("projects")
        second = pipeline.resolve("projects")

        assert extractor.calls == 1
        assert second.provenance == STORED
        assert [normalize_section(s) for s in second.sections] == [normalize_section(s) for s in first.sections]

    def test_page_name_aliases_share_storage(self, app, source_dir, home_page):
        extractor = CountingExtractor()
        pipeline = _pipeline(source_dir, extractor=extractor)

        pipeline.resolve("index.html")
        resolved = pipeline.resolve("/")

        assert extractor.calls == 1
        assert resolved.page == "home"

    def test_missing_document_gives_fallback(self, app, source_dir):
        resolved = _pipeline(source_dir).resolve("contact")

        assert resolved.provenance == FALLBACK
        assert resolved.count == 1
        section = resolved.sections[0]
        assert section.is_fallback
        assert section.section_id == "main"
        assert SectionStore().count_documents(page_name="contact") == 1

    def test_fallback_in_tamil(self, app, source_dir):
        resolved = _pipeline(source_dir).resolve("projects", lang="ta")
        data = normalize_section(resolved.sections[0], lang="ta")
        assert data["sectionTitle"] == "எங்கள் திட்டங்கள்"
        assert "எங்கள் திட்டங்கள்" in data["display"]
        assert "Tamil Cultural Projects" in data["alternate"]

    def test_persistence_failure_serves_unsaved_copy(self, app, source_dir, projects_page):
        resolved = _pipeline(source_dir, store=FailingStore()).resolve("projects")

        assert resolved.persisted is False
        assert resolved.provenance == SCRAPED
        assert resolved.count == 2
        assert SectionStore().count_documents(page_name="projects") == 0

    def test_translator_fills_translation(self, app, source_dir, projects_page):
        resolved = _pipeline(source_dir, translator=UpperTranslator()).resolve("projects")
        section = resolved.sections[0]
        assert section.content_translated == section.content_html.upper()

    def test_translator_failure_is_not_fatal(self, app, source_dir, projects_page):
        resolved = _pipeline(source_dir, translator=BrokenTranslator()).resolve("projects")
        assert resolved.count == 2
        assert resolved.sections[0].content_translated == ""


class TestRefresh:
    """Tests for ContentResolutionPipeline.refresh."""

    def test_refresh_rebuilds_from_markup(self, app, source_dir, projects_page):
        pipeline = _pipeline(source_dir)
        projects_page.rename(source_dir / "projects.bak")
        assert pipeline.resolve("projects").provenance == FALLBACK

        (source_dir / "projects.bak").rename(projects_page)
        refreshed = pipeline.refresh("projects", actor_id="u1")

        assert refreshed.provenance == SCRAPED
        assert SectionStore().count_documents(page_name="projects") == 2

    def test_refresh_overwrite_drops_editor_rows(self, app, source_dir, projects_page):
        pipeline = _pipeline(source_dir)
        pipeline.resolve("projects")
        SectionStore().update_or_create("projects", "custom", {"content_html": "<p>Mine</p>"})

        pipeline.refresh("projects")
        assert SectionStore().get_section("projects", "custom") is None

    def test_refresh_merge_keeps_editor_rows(self, app, source_dir, projects_page):
        pipeline = _pipeline(source_dir, store=SectionStore(reseed_policy=MERGE))
        pipeline.resolve("projects")
        SectionStore().update_or_create("projects", "section-1", {"content_html": "<p>Mine</p>"})

        pipeline.refresh("projects")
        assert SectionStore().get_section("projects", "section-1").content_html == "<p>Mine</p>"


class TestPipelineFromConfig:
    """Tests for pipeline_from_config."""

    def test_uses_app_config(self, app, source_dir):
        app.config["RESEED_POLICY"] = MERGE
        pipeline = pipeline_from_config()
        assert pipeline.store.reseed_policy == MERGE
        assert pipeline.locator.base_dirs == [str(source_dir)]

    def test_source_dirs_follow_content_root(self, tmp_path, monkeypatch):
        monkeypatch.setattr(TestingConfig, "CONTENT_SOURCE_DIRS", None)
        (tmp_path / "public").mkdir()
        (tmp_path / "public" / "about.html").write_text(
            "<main><p>" + "Weekend classes for children and adults. " * 8 + "</p></main>",
            encoding="utf-8",
        )
        app = create_app("testing", overrides={"CONTENT_ROOT": str(tmp_path)})

        with app.app_context():
            pipeline = pipeline_from_config()
            document = pipeline.locator.locate("about")

        assert pipeline.locator.base_dirs == [
            str(tmp_path),
            os.path.join(str(tmp_path), "public"),
            os.path.join(str(tmp_path), "dist"),
            os.path.join(str(tmp_path), "views"),
        ]
        assert document.path == os.path.join(str(tmp_path), "public", "about.html")
