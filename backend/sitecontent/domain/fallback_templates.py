"""
Placeholder content for pages that have neither stored sections nor
extractable markup.
"""
from __future__ import annotations

from dataclasses import dataclass
from html import escape

from .bilingual import BilingualField, resolve_bilingual

_UPDATING_TA = "இந்தப் பக்கத்தின் உள்ளடக்கம் தற்போது புதுப்பிக்கப்படுகிறது."


@dataclass(frozen=True)
class FallbackTemplate:
    title: BilingualField
    content: BilingualField


def _block(heading: str, body: str) -> str:
    return f'<div class="fallback-content"><h1>{heading}</h1><p>{body}</p></div>'


PAGE_TEMPLATES: dict[str, FallbackTemplate] = {
    "home": FallbackTemplate(
        title=BilingualField("Tamil Language Society", "தமிழ்ப் பேரவை"),
        content=BilingualField(
            _block(
                "Welcome to Tamil Language Society",
                "Preserving and promoting the Tamil language and culture for future generations. "
                "Our services include digital books, cultural projects, a bookstore and community engagement.",
            ),
            _block("தமிழ்ப் பேரவைக்கு வரவேற்கிறோம்", _UPDATING_TA),
        ),
    ),
    "about": FallbackTemplate(
        title=BilingualField("About Us", "எங்களைப் பற்றி"),
        content=BilingualField(
            _block("About Tamil Language Society", "We are dedicated to preserving and promoting Tamil language and culture."),
            _block("எங்களைப் பற்றி", _UPDATING_TA),
        ),
    ),
    "contact": FallbackTemplate(
        title=BilingualField("Contact Us", "தொடர்பு"),
        content=BilingualField(
            _block("Contact Information", "Get in touch with Tamil Language Society for more information about our services."),
            _block("தொடர்பு", _UPDATING_TA),
        ),
    ),
    "books": FallbackTemplate(
        title=BilingualField("Book Store", "புத்தக கடை"),
        content=BilingualField(
            _block("Tamil Book Store", "Browse our collection of authentic Tamil literature and educational materials."),
            _block("புத்தக கடை", _UPDATING_TA),
        ),
    ),
    "ebooks": FallbackTemplate(
        title=BilingualField("Digital Library", "மின்னூல் நூலகம்"),
        content=BilingualField(
            _block("Tamil E-Books Library", "Access Tamil books and educational resources in our digital collection."),
            _block("மின்னூல் நூலகம்", _UPDATING_TA),
        ),
    ),
    "projects": FallbackTemplate(
        title=BilingualField("Our Projects", "எங்கள் திட்டங்கள்"),
        content=BilingualField(
            _block("Tamil Cultural Projects", "Join our initiatives and events that celebrate Tamil heritage and traditions."),
            _block("எங்கள் திட்டங்கள்", _UPDATING_TA),
        ),
    ),
}


def template_for(page: str) -> FallbackTemplate:
    if page in PAGE_TEMPLATES:
        return PAGE_TEMPLATES[page]

    label = escape(page.replace("-", " ").capitalize() or "Page")
    return FallbackTemplate(
        title=BilingualField(f"{label} Page", None),
        content=BilingualField(
            _block(label, "Content for this page is currently being updated."),
            _block(label, _UPDATING_TA),
        ),
    )


def render_fallback(page: str, lang: str = "en") -> tuple[str, str, str]:
    """Return (title, content_html, content_translated) for the language."""
    template = template_for(page)
    title = resolve_bilingual(template.title, lang)
    content = resolve_bilingual(template.content, lang)
    # the other-language body rides along as the translation
    translated = template.content.secondary if content == template.content.primary else template.content.primary
    return title, content, translated or ""
