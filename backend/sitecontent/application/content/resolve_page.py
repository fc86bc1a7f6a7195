"""
Page content resolution: stored sections, else sections extracted from
the page's static markup, else a synthesized placeholder.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from flask import current_app

from sitecontent.domain.invariants.exceptions import PersistenceFailure
from sitecontent.domain.page_name import normalize_page_name
from sitecontent.extraction.extractor import ExtractionResult, SectionExtractor
from sitecontent.models.section import Section
from sitecontent.store.section_store import SectionStore
from sitecontent.utils.source_locator import SourceDocumentLocator

logger = logging.getLogger(__name__)

STORED = "stored"
SCRAPED = "scraped"
FALLBACK = "fallback"


class Translator(Protocol):
    def translate(self, text: str) -> str:
        ...


@dataclass
class ResolvedPage:
    page: str
    sections: List[Section] = field(default_factory=list)
    provenance: str = STORED
    persisted: bool = True

    @property
    def count(self) -> int:
        return len(self.sections)


def _transient_sections(page: str, result: ExtractionResult) -> List[Section]:
    """Unsaved Section objects for answering a request the store could not take."""
    sections = []
    for extracted in result.sections:
        record = extracted.to_record()
        section = Section()
        section.page_name = page
        section.section_id = record["section_id"]
        section.section_title = record["section_title"]
        section.content_html = record["content_html"]
        section.content_translated = record["content_translated"]
        section.order = record["order"]
        section.layout = record["layout"]
        section.is_active = True
        section.is_visible = True
        section.section_metadata = record["section_metadata"]
        sections.append(section)
    return sections


class ContentResolutionPipeline:
    def __init__(
        self,
        store: SectionStore,
        locator: SourceDocumentLocator,
        extractor: Optional[SectionExtractor] = None,
        translator: Optional[Translator] = None,
    ):
        self.store = store
        self.locator = locator
        self.extractor = extractor or SectionExtractor()
        self.translator = translator

    def resolve(self, page, lang: str = "en") -> ResolvedPage:
        page = normalize_page_name(page)

        sections = self.store.get_sections(page)
        if sections:
            logger.debug(f"[CONTENT] {page}: {len(sections)} stored sections")
            return ResolvedPage(page=page, sections=sections, provenance=STORED)

        logger.info(f"[CONTENT] {page}: nothing stored, extracting from static markup")
        return self._rebuild(page, lang)

    def refresh(self, page, lang: str = "en", actor_id: Optional[str] = None) -> ResolvedPage:
        """Discard the page's stored sections and rebuild them from markup."""
        page = normalize_page_name(page)
        logger.info(f"[CONTENT] {page}: forced refresh (policy={self.store.reseed_policy})")
        return self._rebuild(page, lang, actor_id=actor_id)

    def _rebuild(self, page: str, lang: str, actor_id: Optional[str] = None) -> ResolvedPage:
        document = self.locator.locate(page)

        if document is None:
            logger.info(f"[CONTENT] {page}: no source document, using fallback content")
            result = self.extractor.synthesize(page, lang)
        else:
            result = self.extractor.extract(document.html, page=page, lang=lang)

        if result.is_fallback:
            return self._persist(page, result, FALLBACK, actor_id)

        self._translate(page, result)
        return self._persist(page, result, SCRAPED, actor_id)

    def _translate(self, page: str, result: ExtractionResult) -> None:
        if self.translator is None:
            return

        for section in result.sections:
            if section.content_translated:
                continue
            try:
                section.content_translated = self.translator.translate(section.content_html) or ""
            except Exception as exc:
                # translation is best-effort; the primary text is still served
                logger.warning(f"[CONTENT] {page}/{section.section_id}: translation failed: {exc}")

    def _persist(self, page: str, result: ExtractionResult, provenance: str, actor_id=None) -> ResolvedPage:
        try:
            self.store.upsert_many(page, result.sections, actor_id=actor_id)
        except PersistenceFailure as exc:
            logger.error(f"[CONTENT] {page}: could not persist {provenance} sections, serving unsaved copy: {exc}")
            return ResolvedPage(
                page=page,
                sections=_transient_sections(page, result),
                provenance=provenance,
                persisted=False,
            )

        sections = self.store.get_sections(page)
        if not sections:
            # merge policy can leave only hidden rows behind
            sections = _transient_sections(page, result)
        logger.info(f"[CONTENT] {page}: serving {len(sections)} {provenance} sections")
        return ResolvedPage(page=page, sections=sections, provenance=provenance)


def pipeline_from_config(translator: Optional[Translator] = None) -> ContentResolutionPipeline:
    config = current_app.config
    return ContentResolutionPipeline(
        store=SectionStore(reseed_policy=config.get("RESEED_POLICY", "overwrite")),
        locator=SourceDocumentLocator(config["CONTENT_SOURCE_DIRS"]),
        translator=translator or current_app.extensions.get("sitecontent.translator"),
    )
