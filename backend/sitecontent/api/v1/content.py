from flask import current_app, request, jsonify
from flask_jwt_extended import jwt_required
from sitecontent.application.content.edit_section import (
    delete_section as delete_section_use_case,
    reorder_sections as reorder_sections_use_case,
    upsert_section,
)
from sitecontent.application.content.resolve_page import pipeline_from_config
from sitecontent.domain.invariants.exceptions import SectionNotFound
from sitecontent.domain.page_name import normalize_page_name
from sitecontent.normalizers.section import normalize_section
from sitecontent.store.section_store import SectionStore
from sitecontent.utils.decorators import roles_required, current_actor_id
from sitecontent.utils.optimistic_lock import enforce_optimistic_lock
from . import v1_bp


def _requested_language():
    return request.args.get("lang") or current_app.config.get("DEFAULT_LANGUAGE", "en")


def _store():
    return SectionStore(reseed_policy=current_app.config.get("RESEED_POLICY", "overwrite"))


def _page_response(resolved, lang, message):
    return jsonify({
        "success": True,
        "data": [normalize_section(s, lang=lang) for s in resolved.sections],
        "count": resolved.count,
        "page": resolved.page,
        "provenance": resolved.provenance,
        "persisted": resolved.persisted,
        "message": message,
    })


# ------------------------
# Public reads
# ------------------------

@v1_bp.route("/content/sections", methods=["GET"])
@v1_bp.route("/content/sections/<page>", methods=["GET"])
def get_page_sections(page=None):
    lang = _requested_language()
    resolved = pipeline_from_config().resolve(page or request.args.get("page"), lang=lang)

    return _page_response(
        resolved,
        lang,
        f"Loaded {resolved.count} sections for {resolved.page}",
    )


@v1_bp.route("/content/sections/<page>/<section_id>", methods=["GET"])
def get_page_section(page, section_id):
    page = normalize_page_name(page)
    section = _store().get_section(page, section_id)
    if section is None:
        raise SectionNotFound(page, section_id)

    return jsonify({
        "success": True,
        "data": normalize_section(section, lang=_requested_language()),
    })


# ------------------------
# Editor writes
# ------------------------

@v1_bp.route("/content/pages", methods=["GET"])
@jwt_required()
@roles_required("admin")
def list_pages():
    pages = [{"page": name, "count": count} for name, count in _store().list_pages()]
    return jsonify({"success": True, "data": pages, "count": len(pages)})


@v1_bp.route("/content/sections/<page>/<section_id>", methods=["PUT", "POST"])
@jwt_required()
@roles_required("admin")
def update_page_section(page, section_id):
    store = _store()
    data = request.get_json(silent=True) or {}

    # -----------------------
    # Optimistic Locking Check
    # -----------------------
    enforce_optimistic_lock(
        store.get_section(normalize_page_name(page), section_id, include_inactive=True)
    )

    section, created = upsert_section(
        store=store,
        page=page,
        section_id=section_id,
        actor_id=current_actor_id(),
        data=data,
    )

    return jsonify({
        "success": True,
        "data": normalize_section(section, admin=True),
        "message": "Section created successfully" if created else "Section updated successfully",
    }), 201 if created else 200


@v1_bp.route("/content/sections/<page>/reorder", methods=["PUT"])
@jwt_required()
@roles_required("admin")
def reorder_page_sections(page):
    sections = reorder_sections_use_case(
        store=_store(),
        page=page,
        actor_id=current_actor_id(),
        data=request.get_json(silent=True),
    )

    return jsonify({
        "success": True,
        "data": [normalize_section(s, admin=True) for s in sections],
        "message": "Sections reordered successfully",
    }), 200


@v1_bp.route("/content/sections/<page>/<section_id>", methods=["DELETE"])
@jwt_required()
@roles_required("admin")
def delete_page_section(page, section_id):
    delete_section_use_case(
        store=_store(),
        page=page,
        section_id=section_id,
        actor_id=current_actor_id(),
    )

    return jsonify({"success": True, "message": "Section deleted successfully"}), 200


@v1_bp.route("/content/refresh/<page>", methods=["POST"])
@jwt_required()
@roles_required("admin")
def refresh_page_content(page):
    lang = _requested_language()
    resolved = pipeline_from_config().refresh(page, lang=lang, actor_id=current_actor_id())

    return _page_response(
        resolved,
        lang,
        f"Content refreshed for {resolved.page} with {resolved.count} sections",
    )
