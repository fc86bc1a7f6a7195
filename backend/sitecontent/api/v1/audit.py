from flask import request, jsonify
from flask_jwt_extended import jwt_required
from sitecontent.models.audit_log import AuditLog
from sitecontent.normalizers.audit import normalize_audit_log
from sitecontent.utils.decorators import roles_required
from sitecontent.utils.pagination import MAX_LIMIT, paginate_cursor
from . import v1_bp


@v1_bp.route("/content/audit", methods=["GET"])
@jwt_required()
@roles_required("admin")
def list_content_audit():
    """Privileged content writes, newest first."""
    query = AuditLog.feed(
        action=request.args.get("action"),
        entity_type=request.args.get("entity_type"),
        entity_id=request.args.get("entity_id"),
    )

    logs, meta = paginate_cursor(
        query,
        model=AuditLog,
        cursor=request.args.get("cursor"),
        limit=min(request.args.get("limit", 20, type=int), MAX_LIMIT),
    )

    return jsonify({
        "success": True,
        "data": [normalize_audit_log(log) for log in logs],
        "count": len(logs),
        "meta": meta,
    }), 200
