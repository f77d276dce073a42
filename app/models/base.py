import uuid
from datetime import date

from ..extensions import db


def new_id():
    return uuid.uuid4().hex


class RecordMixin:
    """Opaque string primary key plus a flat dict view of the row."""

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    def to_dict(self):
        out = {}
        for col in self.__table__.columns:
            val = getattr(self, col.key)
            if isinstance(val, date):
                val = val.isoformat()
            out[col.key] = val
        return out

    def __repr__(self):
        return f"<{type(self).__name__} {self.id}>"
