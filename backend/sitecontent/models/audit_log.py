from sqlalchemy import event

from sitecontent.extensions import db
from .base import BaseModel, JSONDict


class AuditLog(BaseModel):
    """One privileged content write. Rows are append-only."""

    __tablename__ = "content_audit_logs"

    __table_args__ = (
        db.Index("ix_content_audit_entity", "entity_type", "entity_id"),
        db.Index("ix_content_audit_action_created", "action", "created_at"),
    )

    actor_id = db.Column(db.String(36), nullable=True, index=True)
    # section.upsert | section.delete | section.reorder | page.reseed
    action = db.Column(db.String(50), nullable=False)
    entity_type = db.Column(db.String(20), nullable=False)
    # section row id, or the page name for page-level actions
    entity_id = db.Column(db.String(255), nullable=False)
    payload = db.Column(JSONDict, nullable=False, default=dict)

    @classmethod
    def feed(cls, action=None, entity_type=None, entity_id=None):
        query = cls.query
        if action:
            query = query.filter(cls.action == action)
        if entity_type:
            query = query.filter(cls.entity_type == entity_type)
        if entity_id:
            query = query.filter(cls.entity_id == entity_id)
        return query

    def __repr__(self):
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id}>"


@event.listens_for(AuditLog, "before_update")
@event.listens_for(AuditLog, "before_delete")
def _reject_audit_mutation(mapper, connection, target):
    raise RuntimeError(f"Audit log {target.id} is append-only")
