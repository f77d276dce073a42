"""Director approval, reviewer grade slots and final grades.

A project carries two reviewer slots, each with a written and a presentation
grade. Grades may only be entered once a director approved the project;
admins skip that gate. Stored grades always lie in 0.0..5.0.
"""
import logging
import math
from typing import NamedTuple, Optional

from ..models import Project
from ..models.project import GRADE_MAX, GRADE_MIN
from .authz import Authorizer
from .store import EntityStore

logger = logging.getLogger(__name__)

DETAIL_FIELDS = ("title", "presentation_date", "files_url", "status_id", "format_id")


class GradeOutcome(NamedTuple):
    accepted: bool
    slot: Optional[int] = None
    reason: Optional[str] = None


class FinalGrades(NamedTuple):
    written: Optional[float]
    presentation: Optional[float]


def clamp_grade(value):
    """Clamp a grade input into 0.0..5.0; empty input means "no grade"."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    grade = float(value)
    if not math.isfinite(grade):
        raise ValueError(f"grade must be a number, got {value!r}")
    return min(max(grade, GRADE_MIN), GRADE_MAX)


def mean_or_none(values):
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def final_grades(project):
    return FinalGrades(
        written=mean_or_none([project.written_grade_1, project.written_grade_2]),
        presentation=mean_or_none([project.presentation_grade_1,
                                   project.presentation_grade_2]),
    )


def pick_slot(project, permission):
    """Reviewer slot a grade write lands in.

    Numbered reviewer roles use their own slot. Admins and un-numbered
    reviewers fill slot 1 first and move to slot 2 once both slot-1 grades
    are set.
    """
    if permission.slot in (1, 2):
        return permission.slot
    if all(g is not None for g in project.slot_grades(1)):
        return 2
    return 1


class GradingEngine:
    def __init__(self, store: EntityStore, authorizer: Authorizer):
        self.store = store
        self.authorizer = authorizer

    def set_approval(self, user, project_id, approved=True):
        project = self.store.get(Project, project_id)
        if project is None or not self.authorizer.can_edit_project(user, project_id):
            return None
        with self.store.transaction():
            project.director_approved = bool(approved)
        logger.info("project %s approval set to %s by %s", project_id,
                    project.director_approved, user.username)
        return project

    def update_project_details(self, user, project_id, data):
        """Edit the descriptive fields; grades and approval are left alone."""
        if not self.authorizer.can_edit_project(user, project_id):
            return None
        changes = {k: v for k, v in data.items() if k in DETAIL_FIELDS}
        changes["id"] = project_id
        return self.store.update(Project, changes)

    def submit_grades(self, user, project_id, written=None, presentation=None):
        project = self.store.get(Project, project_id)
        if project is None:
            return GradeOutcome(False, reason="not_found")
        permission = self.authorizer.can_grade_project(user, project_id)
        if not permission.can_grade:
            return GradeOutcome(False, reason="forbidden")
        if not project.director_approved and not user.is_admin:
            return GradeOutcome(False, reason="not_approved")

        written = clamp_grade(written)
        presentation = clamp_grade(presentation)
        slot = pick_slot(project, permission)
        with self.store.transaction():
            setattr(project, f"written_grade_{slot}", written)
            setattr(project, f"presentation_grade_{slot}", presentation)
        logger.info("grades for project %s stored in slot %d by %s",
                    project_id, slot, user.username)
        return GradeOutcome(True, slot=slot)
