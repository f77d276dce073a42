"""Entity store: CRUD and bulk replace over the SQLAlchemy record sets.

Every write commits before it returns. A failed commit is rolled back, logged
and re-raised, so the session never keeps changes the database refused.
"""
import logging
from contextlib import contextmanager
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from ..models import (Program, Project, ProjectFormat, ProjectStatus,
                      ProjectTeacher, Student, Teacher, TeacherRole, User,
                      new_id)

logger = logging.getLogger(__name__)

# record-set names used by bulk import/export
KINDS = {
    "users": User,
    "teachers": Teacher,
    "students": Student,
    "projects": Project,
    "project_teachers": ProjectTeacher,
    "teacher_roles": TeacherRole,
    "statuses": ProjectStatus,
    "formats": ProjectFormat,
    "programs": Program,
}

# these kinds have cascades and must go through their explicit delete method
CASCADING_KINDS = (Project, Teacher, Student, User)


class StoreError(Exception):
    pass


class DuplicateAssignmentError(StoreError):
    """A teacher already holds a role on the project."""


class EntityStore:
    def __init__(self, session):
        self.session = session

    @contextmanager
    def transaction(self):
        """Commit on success; roll back, log and re-raise on failure."""
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("store write failed, rolled back")
            raise

    # --- generic CRUD ---
    def list(self, kind):
        return self.session.query(kind).all()

    def get(self, kind, record_id):
        if record_id is None:
            return None
        return self.session.get(kind, record_id)

    def create(self, kind, data):
        fields = coerce_record(kind, {k: v for k, v in data.items() if k != "id"})
        record = kind(**fields)
        with self.transaction() as s:
            s.add(record)
        logger.info("created %s %s", kind.__tablename__, record.id)
        return record

    def update(self, kind, data):
        """Overwrite the fields given in ``data``; unknown ids are a no-op."""
        record = self.get(kind, data.get("id"))
        if record is None:
            return None
        fields = coerce_record(kind, data)
        with self.transaction():
            for key, val in fields.items():
                if key != "id":
                    setattr(record, key, val)
        return record

    def delete(self, kind, record_id):
        if kind in CASCADING_KINDS:
            raise TypeError(
                f"{kind.__name__} has cascades, use its explicit delete method")
        record = self.get(kind, record_id)
        if record is None:
            return
        with self.transaction() as s:
            s.delete(record)
        logger.info("deleted %s %s", kind.__tablename__, record_id)

    def replace_all(self, kind, records):
        """Wholesale overwrite of a record set. No referential validation."""
        with self.transaction() as s:
            rows = self.replace_rows(s, kind, records)
        logger.info("replaced %s with %d records", kind.__tablename__, len(rows))
        return rows

    @staticmethod
    def replace_rows(session, kind, records):
        """Swap the rows of ``kind`` inside the caller's transaction."""
        rows = [kind(**coerce_record(kind, rec)) for rec in records]
        for old in session.query(kind).all():
            session.delete(old)
        session.flush()
        session.add_all(rows)
        session.flush()
        return rows

    # --- projects ---
    def delete_project(self, project_id):
        """Delete a project, unassign its students, drop its teacher roles."""
        project = self.get(Project, project_id)
        if project is None:
            return
        with self.transaction() as s:
            self._detach_projects(s, [project_id])
            s.delete(project)
        logger.info("deleted project %s", project_id)

    def replace_projects(self, records):
        """Replace all projects and apply the delete cascade to vanished ones."""
        with self.transaction() as s:
            before = {p.id for p in s.query(Project).all()}
            rows = self.replace_rows(s, Project, records)
            gone = before - {p.id for p in rows}
            if gone:
                self._detach_projects(s, gone)
        logger.info("replaced projects with %d records", len(rows))
        return rows

    @staticmethod
    def _detach_projects(session, project_ids):
        project_ids = list(project_ids)
        (session.query(Student)
            .filter(Student.project_id.in_(project_ids))
            .update({Student.project_id: None}, synchronize_session="fetch"))
        (session.query(ProjectTeacher)
            .filter(ProjectTeacher.project_id.in_(project_ids))
            .delete(synchronize_session="fetch"))

    # --- assignments ---
    def assignments_for(self, project_id=None, teacher_id=None):
        q = self.session.query(ProjectTeacher)
        if project_id is not None:
            q = q.filter(ProjectTeacher.project_id == project_id)
        if teacher_id is not None:
            q = q.filter(ProjectTeacher.teacher_id == teacher_id)
        return q.all()

    def assign_teacher(self, project_id, teacher_id, role_id):
        if self.assignments_for(project_id=project_id, teacher_id=teacher_id):
            logger.warning("teacher %s already has a role on project %s",
                           teacher_id, project_id)
            raise DuplicateAssignmentError(
                f"teacher {teacher_id} already holds a role on project {project_id}")
        return self.create(ProjectTeacher, {
            "project_id": project_id, "teacher_id": teacher_id, "role_id": role_id,
        })

    def unassign_teacher(self, assignment_id):
        self.delete(ProjectTeacher, assignment_id)

    # --- lookups ---
    def lookup_name(self, kind, record_id):
        """Name of a lookup row, tolerating ids whose row was deleted."""
        record = self.get(kind, record_id)
        if record is None:
            return f"unknown ({record_id})"
        return record.name


def coerce_record(kind, record):
    """Map decoded text values onto the column types of ``kind``."""
    columns = kind.__table__.columns
    skip = getattr(kind, "DERIVED_COLUMNS", ())
    out = {}
    for key, val in record.items():
        if key not in columns or key in skip:
            continue
        out[key] = _coerce_value(columns[key], val)
    if not out.get("id"):
        out["id"] = new_id()
    return out


def _coerce_value(column, val):
    if val is None or val == "":
        return None
    py_type = column.type.python_type
    if isinstance(val, py_type):
        return val
    if py_type is bool:
        return str(val).strip().lower() in ("true", "1", "yes")
    if py_type is date:
        return date.fromisoformat(str(val))
    if py_type in (int, float):
        return py_type(val)
    return str(val)
