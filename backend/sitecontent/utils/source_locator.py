import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sitecontent.domain.page_name import HOME_PAGE, normalize_page_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceDocument:
    page: str
    path: str
    html: str


class SourceDocumentLocator:
    """
    Finds the static HTML file backing a page.

    Base directories are searched in order and the first readable
    `<page>.html` wins ("home" maps to index.html). Absence is reported
    as None, never as an exception.
    """

    def __init__(self, base_dirs: Iterable[str]):
        self.base_dirs = [os.path.abspath(d) for d in base_dirs]

    @staticmethod
    def file_name_for(page: str) -> str:
        page = normalize_page_name(page)
        return "index.html" if page == HOME_PAGE else f"{page}.html"

    def candidates(self, page: str) -> List[str]:
        file_name = self.file_name_for(page)
        return [os.path.join(base, file_name) for base in self.base_dirs]

    def locate(self, page: str) -> Optional[SourceDocument]:
        page = normalize_page_name(page)

        if "/" in page or "\\" in page or ".." in page:
            logger.warning(f"[LOCATOR] Refusing suspicious page name '{page}'")
            return None

        paths = self.candidates(page)
        for path in paths:
            if not os.path.isfile(path):
                logger.debug(f"[LOCATOR] No HTML file at {path}")
                continue
            try:
                with open(path, "r", encoding="utf-8", errors="replace") as fh:
                    html = fh.read()
            except OSError as exc:
                logger.error(f"[LOCATOR] Failed to read {path}: {exc}")
                continue

            logger.info(f"[LOCATOR] Found HTML for '{page}' at {path}")
            return SourceDocument(page=page, path=path, html=html)

        logger.warning(
            f"[LOCATOR] HTML file not found for page '{page}' in any of {len(paths)} locations"
        )
        return None
