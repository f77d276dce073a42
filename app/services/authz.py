"""Per-project permission checks.

Checks never raise: a denial is ``False`` or an empty result and the caller
decides what to do with it. Role meaning comes from the capability columns
that ``TeacherRole`` derives from its name.
"""
from typing import NamedTuple, Optional

from ..models import ProjectTeacher, Student, TeacherRole
from .store import EntityStore

ADMIN_LABEL = "admin"


class GradePermission(NamedTuple):
    can_grade: bool
    reviewer_label: Optional[str]
    slot: Optional[int] = None


DENIED = GradePermission(False, None, None)


class Authorizer:
    def __init__(self, store: EntityStore):
        self.store = store

    def project_roles(self, user, project_id):
        """Roles the user's teacher profile holds on the project."""
        if user is None or not user.teacher_id:
            return []
        return (self.store.session.query(TeacherRole)
                .join(ProjectTeacher, ProjectTeacher.role_id == TeacherRole.id)
                .filter(ProjectTeacher.project_id == project_id,
                        ProjectTeacher.teacher_id == user.teacher_id)
                .order_by(ProjectTeacher.id)
                .all())

    def project_role_names(self, user, project_id):
        return {role.name for role in self.project_roles(user, project_id)}

    def can_edit_project(self, user, project_id):
        if user is None:
            return False
        if user.is_admin:
            return True
        if not user.is_teacher:
            return False
        return any(role.approves for role in self.project_roles(user, project_id))

    def can_grade_project(self, user, project_id):
        if user is None:
            return DENIED
        if user.is_admin:
            return GradePermission(True, ADMIN_LABEL, None)
        if not user.is_teacher:
            return DENIED
        for role in self.project_roles(user, project_id):
            if role.reviews:
                return GradePermission(True, role.name, role.reviewer_slot)
        return DENIED

    def can_manage_people(self, user):
        return user is not None and user.is_admin

    def can_view_project(self, user, project_id):
        if user is None:
            return False
        if user.is_admin:
            return True
        if user.is_teacher:
            return bool(self.store.assignments_for(project_id=project_id,
                                                   teacher_id=user.teacher_id))
        if user.is_student:
            student = self.store.get(Student, user.student_id)
            return student is not None and student.project_id == project_id
        return False
