def normalize_audit_log(log):
    """camelCase view of an AuditLog row, matching the section payloads."""
    payload = dict(log.payload or {})
    return {
        "id": log.id,
        "actorId": log.actor_id,
        "action": log.action,
        "entityType": log.entity_type,
        "entityId": log.entity_id,
        "page": payload.get("page") or (log.entity_id if log.entity_type == "page" else None),
        "payload": payload,
        "createdAt": log.created_at.isoformat() if log.created_at else None,
    }
