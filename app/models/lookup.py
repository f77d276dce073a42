from sqlalchemy.orm import validates

from ..extensions import db
from .base import RecordMixin

APPROVER_MARKERS = ("director",)
REVIEWER_MARKERS = ("evaluator", "evaluador", "reviewer")


def role_capabilities(name):
    """Derive ``(approves, reviews, reviewer_slot)`` from a free-text role name.

    Matching is case-insensitive and substring based, so "Co-Director"
    approves just like "Director". A reviewer role whose name contains "1"
    grades into slot 1, otherwise "2" selects slot 2; without a digit the
    slot is left open.
    """
    lowered = (name or "").lower()
    approves = any(m in lowered for m in APPROVER_MARKERS)
    reviews = any(m in lowered for m in REVIEWER_MARKERS)
    slot = None
    if reviews:
        if "1" in lowered:
            slot = 1
        elif "2" in lowered:
            slot = 2
    return approves, reviews, slot


class ProjectStatus(RecordMixin, db.Model):
    __tablename__ = "project_status"
    name = db.Column(db.String(64), nullable=False)

class ProjectFormat(RecordMixin, db.Model):
    __tablename__ = "project_format"
    name = db.Column(db.String(64), nullable=False)

class Program(RecordMixin, db.Model):
    __tablename__ = "program"
    name = db.Column(db.String(128), nullable=False)

class TeacherRole(RecordMixin, db.Model):
    __tablename__ = "teacher_role"
    # recomputed from the name, never imported
    DERIVED_COLUMNS = ("approves", "reviews", "reviewer_slot")

    name = db.Column(db.String(64), nullable=False)
    approves = db.Column(db.Boolean, nullable=False, default=False)
    reviews = db.Column(db.Boolean, nullable=False, default=False)
    reviewer_slot = db.Column(db.Integer)

    @validates("name")
    def _derive_capabilities(self, key, name):
        self.approves, self.reviews, self.reviewer_slot = role_capabilities(name)
        return name
