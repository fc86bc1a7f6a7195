from sitecontent.domain.bilingual import resolve_bilingual, alternate_text


def _iso(ts):
    return ts.isoformat() if ts is not None else None


def normalize_section(section, lang=None, admin=False):
    data = {
        "id": section.id,
        "pageName": section.page_name,
        "sectionId": section.section_id,
        "sectionTitle": section.section_title,
        "contentHtml": section.content_html,
        "contentTranslated": section.content_translated or "",
        "order": section.order,
        "layout": section.layout,
        "isActive": section.is_active,
        "isVisible": section.is_visible,
        "isFallback": section.is_fallback,
        "metadata": dict(section.section_metadata or {}),
        "lastUpdated": _iso(section.updated_at),
    }

    if lang:
        field = section.to_bilingual()
        data["display"] = resolve_bilingual(field, lang)
        data["alternate"] = alternate_text(field, lang)

    if admin:
        data["createdBy"] = section.created_by
        data["updatedBy"] = section.updated_by
        data["createdAt"] = _iso(section.created_at)

    return data
