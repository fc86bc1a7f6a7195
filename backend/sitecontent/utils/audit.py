import logging
from typing import Any, Dict, Optional

from sitecontent.extensions import db
from sitecontent.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

PAGE_WIDE = "*"


def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    actor_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Stage an audit row in the open unit of work; the caller commits."""
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id or PAGE_WIDE,
        payload=dict(payload or {}),
    )
    db.session.add(entry)
    logger.debug(f"[AUDIT] {action} {entity_type}:{entry.entity_id} by {actor_id or 'system'}")
    return entry
