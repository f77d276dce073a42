from flask import g

from ..extensions import db
from .authz import Authorizer, GradePermission
from .grading import GradingEngine, GradeOutcome, FinalGrades, clamp_grade, final_grades
from .identity import IdentityService, UsernameTakenError, session_expired, username_for
from .reports import Reports
from .store import KINDS, DuplicateAssignmentError, EntityStore, StoreError
from . import csv_codec

__all__ = [
    "Authorizer", "GradePermission", "GradingEngine", "GradeOutcome",
    "FinalGrades", "clamp_grade", "final_grades", "IdentityService",
    "UsernameTakenError", "session_expired", "username_for", "Reports",
    "KINDS", "DuplicateAssignmentError", "EntityStore", "StoreError",
    "csv_codec", "Engine", "get_engine",
]


class Engine:
    """All services wired to one store."""

    def __init__(self, session):
        self.store = EntityStore(session)
        self.identity = IdentityService(self.store)
        self.authz = Authorizer(self.store)
        self.grading = GradingEngine(self.store, self.authz)
        self.reports = Reports(self.store)


def get_engine():
    """Engine bound to the current request's session."""
    if "engine" not in g:
        g.engine = Engine(db.session)
    return g.engine
