import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.mutable import MutableDict

from sitecontent.extensions import db


def utc_now():
    return datetime.now(timezone.utc)


def new_id():
    return str(uuid.uuid4())


# JSON object column whose in-place edits are tracked
JSONDict = MutableDict.as_mutable(db.JSON)


class BaseModel(db.Model):
    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    def __init__(self, **kwargs):
        # keeps type checkers aware that models accept column keywords
        super().__init__(**kwargs)
