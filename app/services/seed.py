import logging
from datetime import date

from ..models import (Program, Project, ProjectFormat, ProjectStatus,
                      ProjectTeacher, Student, Teacher, TeacherRole, User)
from ..models.user import ADMIN, STUDENT, TEACHER
from .identity import username_for
from .store import EntityStore

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin"

STATUSES = [
    ("status-1", "Proposed"),
    ("status-2", "In Progress"),
    ("status-3", "In Review"),
    ("status-4", "Approved"),
    ("status-5", "Rejected"),
]
FORMATS = [
    ("format-1", "Standard Thesis"),
    ("format-2", "Research Article"),
    ("format-3", "Software Project"),
]
ROLES = [
    ("role-1", "Director"),
    ("role-2", "Co-Director"),
    ("role-3", "Evaluator 1"),
    ("role-4", "Evaluator 2"),
]
PROGRAMS = [
    ("program-1", "Systems Engineering"),
    ("program-2", "Industrial Engineering"),
]
TEACHERS = [
    ("teacher-1", "Dr. Eleanor Vance", "eleanor.v@university.edu", "1001"),
    ("teacher-2", "Prof. Ben Carter", "ben.c@university.edu", "1002"),
    ("teacher-3", "Dr. Olivia Chen", "olivia.c@university.edu", "1003"),
]
PROJECTS = [
    ("project-1", "Predictive Maintenance with AI", date(2024, 12, 15),
     "https://example.com/project1", "status-2", "format-3"),
    ("project-2", "Quantum Computing for Drug Discovery", date(2025, 1, 20),
     "https://example.com/project2", "status-1", "format-1"),
]
STUDENTS = [
    ("student-1", "Alice Johnson", "alice.j@student.edu", "2001", "program-1", "project-1"),
    ("student-2", "Bob Williams", "bob.w@student.edu", "2002", "program-1", "project-1"),
    ("student-3", "Charlie Brown", "charlie.b@student.edu", "2003", "program-2", "project-2"),
    ("student-4", "Diana Miller", "diana.m@student.edu", "2004", "program-2", None),
]
ASSIGNMENTS = [
    ("pt-1", "project-1", "teacher-1", "role-1"),
    ("pt-2", "project-1", "teacher-2", "role-3"),
]


def seed_if_empty(store: EntityStore):
    """Load the default dataset when no account exists yet."""
    if store.session.query(User).first() is not None:
        return False
    rows = [User(id="user-admin", username=ADMIN_USERNAME,
                 password=ADMIN_PASSWORD, role=ADMIN)]
    rows += [ProjectStatus(id=i, name=n) for i, n in STATUSES]
    rows += [ProjectFormat(id=i, name=n) for i, n in FORMATS]
    rows += [TeacherRole(id=i, name=n) for i, n in ROLES]
    rows += [Program(id=i, name=n) for i, n in PROGRAMS]
    for tid, name, email, nid in TEACHERS:
        rows.append(Teacher(id=tid, name=name, email=email, national_id=nid))
        rows.append(User(id=f"user-{tid}", username=username_for(email),
                         password=nid, role=TEACHER, teacher_id=tid))
    rows += [Project(id=i, title=t, presentation_date=d, files_url=u,
                     status_id=s, format_id=f) for i, t, d, u, s, f in PROJECTS]
    for sid, name, email, nid, program, project in STUDENTS:
        rows.append(Student(id=sid, name=name, email=email, national_id=nid,
                            program_id=program, project_id=project))
        rows.append(User(id=f"user-{sid}", username=username_for(email),
                         password=nid, role=STUDENT, student_id=sid))
    rows += [ProjectTeacher(id=i, project_id=p, teacher_id=t, role_id=r)
             for i, p, t, r in ASSIGNMENTS]
    with store.transaction() as s:
        s.add_all(rows)
    logger.info("seeded default dataset (%d rows)", len(rows))
    return True
