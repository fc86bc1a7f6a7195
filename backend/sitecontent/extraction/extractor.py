"""
Section extraction from static page markup.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from sitecontent.domain.fallback_templates import render_fallback
from sitecontent.domain.invariants.section import MAX_TITLE
from .strategies import DEFAULT_STRATEGIES, ExtractionStrategy, block_text, hint_tokens
from .truncate import truncate_html

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"

MIN_TEXT_LENGTH = 50
TITLE_WORDS = 5
TITLE_EXCERPT_LIMIT = 30

TITLE_SELECTOR = "h1, h2, h3, h4, h5, h6, .title, .heading, .section-title"

LAYOUT_HINTS = (
    ("hero", "hero"),
    ("feature", "features"),
    ("gallery", "gallery"),
    ("testimonial", "testimonials"),
    ("contact", "contact"),
    ("footer", "footer"),
)

SYNTHESIS_STRATEGY = "synthesis"


@dataclass
class ExtractedSection:
    """A content block lifted from markup, ready to persist."""

    section_id: str
    section_title: Optional[str]
    content_html: str
    order: int
    layout: str = "default"
    content_translated: str = ""
    is_fallback: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        return {
            "section_id": self.section_id,
            "section_title": self.section_title,
            "content_html": self.content_html,
            "content_translated": self.content_translated,
            "order": self.order,
            "layout": self.layout,
            "section_metadata": dict(self.metadata),
        }


@dataclass
class ExtractionResult:
    sections: List[ExtractedSection] = field(default_factory=list)
    strategy: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.strategy == SYNTHESIS_STRATEGY

    def __len__(self):
        return len(self.sections)


def derive_title(block: Tag, text: str) -> str:
    heading = block.select_one(TITLE_SELECTOR)
    if heading is not None:
        title = block_text(heading)
        if title:
            return title[:MAX_TITLE]

    excerpt = " ".join(text.split()[:TITLE_WORDS])
    if len(excerpt) > TITLE_EXCERPT_LIMIT:
        return excerpt[:TITLE_EXCERPT_LIMIT] + "..."
    return excerpt


def derive_layout(block: Tag) -> str:
    tokens = hint_tokens(block)
    if block.name == "footer":
        return "footer"
    for hint, layout in LAYOUT_HINTS:
        if any(hint in token for token in tokens):
            return layout
    return "default"


class SectionExtractor:
    """
    Turns raw page markup into ordered sections.

    Strategies are tried in order; the first one that yields at least one
    block with enough text wins. When none does, a single placeholder
    section is synthesized from the page template.
    """

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy] = DEFAULT_STRATEGIES,
        min_text_length: int = MIN_TEXT_LENGTH,
    ):
        self.strategies = list(strategies)
        self.min_text_length = min_text_length

    def extract(self, html: Optional[str], page: str = "home", lang: str = "en") -> ExtractionResult:
        sections = []
        if html and html.strip():
            soup = BeautifulSoup(html, HTML_PARSER)
            for strategy in self.strategies:
                sections = self._build_sections(strategy.find_blocks(soup), strategy.name)
                if sections:
                    logger.info(
                        f"[SCRAPER] {page}: {len(sections)} sections via '{strategy.name}' strategy"
                    )
                    return ExtractionResult(sections=sections, strategy=strategy.name)
                logger.debug(f"[SCRAPER] {page}: '{strategy.name}' strategy found nothing usable")

        logger.warning(f"[SCRAPER] {page}: no usable blocks, synthesizing placeholder")
        return self.synthesize(page, lang)

    def synthesize(self, page: str, lang: str = "en") -> ExtractionResult:
        title, content, translated = render_fallback(page, lang)
        section = ExtractedSection(
            section_id="main",
            section_title=title,
            content_html=content,
            content_translated=translated,
            order=0,
            is_fallback=True,
            metadata={"isFallback": True, "source": "fallback", "language": lang},
        )
        return ExtractionResult(sections=[section], strategy=SYNTHESIS_STRATEGY)

    def _build_sections(self, blocks: List[Tag], strategy_name: str) -> List[ExtractedSection]:
        sections: List[ExtractedSection] = []
        seen_text = set()

        for block in blocks:
            text = block_text(block)
            if len(text) < self.min_text_length or text in seen_text:
                continue
            seen_text.add(text)

            index = len(sections)
            sections.append(
                ExtractedSection(
                    section_id=f"section-{index + 1}",
                    section_title=derive_title(block, text),
                    content_html=truncate_html(str(block).strip()),
                    order=index,
                    layout=derive_layout(block),
                    metadata={"source": "scraped", "strategy": strategy_name},
                )
            )

        return sections
