from ..extensions import db
from .base import new_id
from .people import Student, Teacher
from .project import Project, ProjectTeacher
from .lookup import ProjectStatus, ProjectFormat, Program, TeacherRole
from .user import User

__all__ = [
    "Student", "Teacher", "Project", "ProjectTeacher",
    "ProjectStatus", "ProjectFormat", "Program", "TeacherRole", "User",
    "new_id",
]
