"""
Block selection strategies for static page markup.

Each strategy inspects a parsed document and returns candidate content
blocks in document order. The extractor walks them in sequence and stops
at the first one that produces a usable section.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import List

from bs4 import BeautifulSoup, Comment, Tag

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def block_text(tag: Tag) -> str:
    """Rendered text of a block with whitespace collapsed."""
    return _WHITESPACE.sub(" ", tag.get_text(" ", strip=True)).strip()


def hint_tokens(tag: Tag) -> List[str]:
    """Lowercased class names and id of an element."""
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    tokens = [c.lower() for c in classes]
    if tag.get("id"):
        tokens.append(str(tag["id"]).lower())
    return tokens


def outermost(tags: List[Tag]) -> List[Tag]:
    """Drop every tag nested inside another tag of the same list."""
    selected = {id(t) for t in tags}
    result = []
    for tag in tags:
        if any(id(parent) in selected for parent in tag.parents):
            continue
        result.append(tag)
    return result


class ExtractionStrategy:
    name = "base"

    def find_blocks(self, soup: BeautifulSoup) -> List[Tag]:
        raise NotImplementedError


class StructuralStrategy(ExtractionStrategy):
    """Explicit <section> elements."""

    name = "structural"

    def find_blocks(self, soup):
        return outermost(soup.find_all("section"))


class HeuristicContainerStrategy(ExtractionStrategy):
    """Containers whose class or id suggests a content block, plus landmarks."""

    name = "heuristic-container"

    SPECIFIC_HINTS = (
        "hero", "feature", "stats", "statistic", "announcement",
        "about", "contact", "section", "content", "block",
    )
    GENERIC_CLASSES = {"container", "row"}
    LANDMARKS = {"header", "footer"}

    def _is_specific(self, tag: Tag) -> bool:
        if tag.name in self.LANDMARKS or tag.has_attr("data-content"):
            return True
        return any(hint in token for token in hint_tokens(tag) for hint in self.SPECIFIC_HINTS)

    def _is_generic(self, tag: Tag) -> bool:
        return tag.name == "div" and bool(self.GENERIC_CLASSES & set(hint_tokens(tag)))

    def find_blocks(self, soup):
        body = soup.body or soup
        specific = []
        generic = []
        for tag in body.find_all(True):
            if tag.name in ("script", "style", "nav"):
                continue
            if self._is_specific(tag):
                specific.append(tag)
            elif self._is_generic(tag):
                generic.append(tag)

        specific_ids = {id(t) for t in specific}
        # wrappers only count when nothing more specific lives inside them
        for tag in generic:
            if not any(id(d) in specific_ids for d in tag.find_all(True)):
                specific.append(tag)

        selected = {id(t) for t in specific}
        ordered = [t for t in body.find_all(True) if id(t) in selected]
        return outermost(ordered)


class MainContentStrategy(ExtractionStrategy):
    """Largest meaningful region left after stripping navigation and boilerplate."""

    name = "main-content"

    STRIP_TAGS = ("script", "style", "noscript", "nav", "header", "footer", "template")
    NAV_HINTS = ("nav", "menu", "sidebar", "breadcrumb", "pagination", "skip-link")
    CANDIDATE_SELECTORS = (
        "main",
        "[role=main]",
        "article",
        "#main-content",
        ".main-content",
        "#content",
        ".content",
        "body",
    )
    MIN_TEXT_LENGTH = 200

    # regions whose markup exceeds SPLIT_THRESHOLD are cut into several parts
    SPLIT_THRESHOLD = 4000
    CHUNK_SIZE = 3500
    HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")
    PARAGRAPH_TAGS = ("p", "div")

    def _strip(self, soup: BeautifulSoup) -> BeautifulSoup:
        cleaned = copy.copy(soup)

        for comment in cleaned.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        for tag_name in self.STRIP_TAGS:
            for element in cleaned.find_all(tag_name):
                element.decompose()

        for element in cleaned.find_all(True):
            if element.decomposed:
                continue
            if element.name in ("html", "body"):
                continue
            if any(hint in token for token in hint_tokens(element) for hint in self.NAV_HINTS):
                element.decompose()

        return cleaned

    def find_blocks(self, soup):
        cleaned = self._strip(soup)

        best = None
        best_length = 0
        for selector in self.CANDIDATE_SELECTORS:
            for candidate in cleaned.select(selector):
                length = len(block_text(candidate))
                if length >= self.MIN_TEXT_LENGTH and length > best_length:
                    best, best_length = candidate, length
            if best is not None:
                break

        if best is None:
            return []

        logger.debug(f"[SCRAPER] main content region <{best.name}> ({best_length} chars)")
        if len(str(best)) <= self.SPLIT_THRESHOLD:
            return [best]

        parts = self._split_at_headings(cleaned, best) or self._split_into_chunks(cleaned, best)
        if not parts:
            return [best]
        logger.debug(f"[SCRAPER] oversized main content split into {len(parts)} parts")
        return parts

    @staticmethod
    def _wrap(soup: BeautifulSoup, nodes) -> Tag:
        wrapper = soup.new_tag("div", attrs={"class": "content-part"})
        for node in nodes:
            wrapper.append(node)
        return wrapper

    def _split_at_headings(self, soup: BeautifulSoup, region: Tag) -> List[Tag]:
        """One part per heading run, when the headings are siblings holding all the region's text."""
        headings = region.find_all(self.HEADINGS)
        if len(headings) < 2:
            return []

        container = headings[0].parent
        if block_text(container) != block_text(region):
            return []
        children = list(container.children)
        if sum(1 for c in children if isinstance(c, Tag) and c.name in self.HEADINGS) < 2:
            return []

        runs = [[]]
        for child in children:
            if isinstance(child, Tag) and child.name in self.HEADINGS and runs[-1]:
                runs.append([])
            runs[-1].append(child)
        return [self._wrap(soup, run) for run in runs]

    def _split_into_chunks(self, soup: BeautifulSoup, region: Tag) -> List[Tag]:
        """Innermost paragraphs grouped into parts of roughly CHUNK_SIZE markup characters."""
        leaves = [t for t in region.find_all(self.PARAGRAPH_TAGS) if t.find(self.PARAGRAPH_TAGS) is None]

        chunks, current, size = [], [], 0
        for leaf in leaves:
            length = len(str(leaf))
            if current and size + length > self.CHUNK_SIZE:
                chunks.append(current)
                current, size = [], 0
            current.append(leaf)
            size += length
        if current:
            chunks.append(current)

        if len(chunks) < 2:
            return []
        return [self._wrap(soup, chunk) for chunk in chunks]


DEFAULT_STRATEGIES = (
    StructuralStrategy(),
    HeuristicContainerStrategy(),
    MainContentStrategy(),
)
