from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

PRIMARY_LANGUAGE = "en"
SECONDARY_LANGUAGE = "ta"


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


@dataclass(frozen=True)
class BilingualField:
    """One piece of content in the primary and secondary language."""

    primary: Optional[str] = None
    secondary: Optional[str] = None

    @classmethod
    def coerce(
        cls,
        value: Any,
        primary_lang: str = PRIMARY_LANGUAGE,
        secondary_lang: str = SECONDARY_LANGUAGE,
    ) -> "BilingualField":
        """Accept a BilingualField, a plain string or a {lang: text} mapping."""
        if isinstance(value, BilingualField):
            return value
        if value is None:
            return cls()
        if isinstance(value, dict):
            return cls(value.get(primary_lang), value.get(secondary_lang))
        return cls(str(value), None)

    def value_for(self, lang: str, primary_lang: str = PRIMARY_LANGUAGE) -> Optional[str]:
        return self.primary if lang == primary_lang else self.secondary


def resolve_bilingual(
    field: Any,
    lang: Optional[str],
    primary_lang: str = PRIMARY_LANGUAGE,
    secondary_lang: str = SECONDARY_LANGUAGE,
) -> str:
    """
    Resolve a bilingual field to displayable text.

    Order: requested language, then primary, then secondary, then "".
    Blank strings count as missing.
    """
    field = BilingualField.coerce(field, primary_lang, secondary_lang)
    candidates = []

    if lang in (primary_lang, secondary_lang):
        candidates.append(field.value_for(lang, primary_lang))
    candidates.extend([field.primary, field.secondary])

    for candidate in candidates:
        if _present(candidate):
            return candidate
    return ""


def alternate_text(
    field: Any,
    lang: Optional[str],
    primary_lang: str = PRIMARY_LANGUAGE,
    secondary_lang: str = SECONDARY_LANGUAGE,
) -> Optional[str]:
    """
    Text for an "also show the other language" rendering.

    None when the other language is missing or identical to what
    resolve_bilingual already chose.
    """
    field = BilingualField.coerce(field, primary_lang, secondary_lang)
    chosen = resolve_bilingual(field, lang, primary_lang, secondary_lang)

    for candidate in (field.primary, field.secondary):
        if _present(candidate) and candidate.strip() != chosen.strip():
            return candidate
    return None
