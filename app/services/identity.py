"""Teacher/student profiles and the login accounts derived from them.

Every teacher and student owns exactly one ``User``: the username is the
local part of the profile email, the password is the national id. Profile
writes and account writes commit together.
"""
import logging
import time

from sqlalchemy import func

from ..models import ProjectTeacher, Student, Teacher, User, new_id
from ..models.user import ADMIN, STUDENT, TEACHER
from .store import EntityStore, StoreError, coerce_record

logger = logging.getLogger(__name__)


class UsernameTakenError(StoreError):
    """The derived username already belongs to another account."""


def username_for(email):
    return (email or "").split("@", 1)[0]


def session_expired(logged_in_at, lifetime, now=None):
    """True when a login made at ``logged_in_at`` (epoch seconds) is older
    than ``lifetime``."""
    if logged_in_at is None:
        return True
    if now is None:
        now = time.time()
    return now - logged_in_at > lifetime.total_seconds()


class IdentityService:
    def __init__(self, store: EntityStore):
        self.store = store

    @property
    def session(self):
        return self.store.session

    # --- lookups ---
    def find_by_username(self, username):
        return (self.session.query(User)
                .filter(func.lower(User.username) == (username or "").lower())
                .one_or_none())

    def user_for_teacher(self, teacher_id):
        return self.session.query(User).filter_by(teacher_id=teacher_id).first()

    def user_for_student(self, student_id):
        return self.session.query(User).filter_by(student_id=student_id).first()

    def _check_username(self, username, owner=None):
        existing = self.find_by_username(username)
        if existing is not None and existing is not owner:
            raise UsernameTakenError(f"username {username!r} is already in use")

    def _check_bulk_usernames(self, records, role):
        """Usernames derived from ``records`` must not clash, ignoring case,
        with each other or with any account outside ``role``."""
        taken = {u.username.lower()
                 for u in self.session.query(User).filter(User.role != role)}
        for rec in records:
            username = username_for(rec.get("email"))
            if username.lower() in taken:
                raise UsernameTakenError(f"username {username!r} is already in use")
            taken.add(username.lower())

    def authenticate(self, username, password):
        """Return the matching user or None. Username match ignores case."""
        user = self.find_by_username(username)
        if user is None or user.password != password:
            logger.info("failed login for %r", username)
            return None
        return user

    # --- teachers ---
    def create_teacher(self, data):
        fields = coerce_record(Teacher, {k: v for k, v in data.items() if k != "id"})
        teacher = Teacher(**fields)
        username = username_for(teacher.email)
        self._check_username(username)
        user = User(id=new_id(), username=username, password=teacher.national_id,
                    role=TEACHER, teacher_id=teacher.id)
        with self.store.transaction() as s:
            s.add_all([teacher, user])
        logger.info("created teacher %s with account %s", teacher.id, username)
        return teacher

    def update_teacher(self, data):
        teacher = self.store.get(Teacher, data.get("id"))
        if teacher is None:
            return None
        fields = coerce_record(Teacher, data)
        user = self.user_for_teacher(teacher.id)
        email = fields.get("email", teacher.email)
        if user is not None:
            self._check_username(username_for(email), owner=user)
        with self.store.transaction():
            for key, val in fields.items():
                if key != "id":
                    setattr(teacher, key, val)
            # a teacher whose account was deleted keeps working without one
            if user is not None:
                user.username = username_for(teacher.email)
                user.password = teacher.national_id
        return teacher

    def delete_teacher(self, teacher_id):
        """Delete a teacher, their project roles and their account."""
        teacher = self.store.get(Teacher, teacher_id)
        if teacher is None:
            return
        with self.store.transaction() as s:
            s.query(ProjectTeacher).filter_by(teacher_id=teacher_id).delete(
                synchronize_session="fetch")
            s.query(User).filter_by(teacher_id=teacher_id).delete(
                synchronize_session="fetch")
            s.delete(teacher)
        logger.info("deleted teacher %s", teacher_id)

    # --- students ---
    def create_student(self, data):
        fields = coerce_record(Student, {k: v for k, v in data.items() if k != "id"})
        student = Student(**fields)
        username = username_for(student.email)
        self._check_username(username)
        user = User(id=new_id(), username=username, password=student.national_id,
                    role=STUDENT, student_id=student.id)
        with self.store.transaction() as s:
            s.add_all([student, user])
        logger.info("created student %s with account %s", student.id, username)
        return student

    def update_student(self, data):
        student = self.store.get(Student, data.get("id"))
        if student is None:
            return None
        fields = coerce_record(Student, data)
        user = self.user_for_student(student.id)
        email = fields.get("email", student.email)
        if user is not None:
            self._check_username(username_for(email), owner=user)
        with self.store.transaction():
            for key, val in fields.items():
                if key != "id":
                    setattr(student, key, val)
            if user is not None:
                user.username = username_for(student.email)
                user.password = student.national_id
        return student

    def delete_student(self, student_id):
        student = self.store.get(Student, student_id)
        if student is None:
            return
        with self.store.transaction() as s:
            s.query(User).filter_by(student_id=student_id).delete(
                synchronize_session="fetch")
            s.delete(student)
        logger.info("deleted student %s", student_id)

    # --- accounts ---
    def delete_user(self, user_id):
        """Delete an account only; the linked profile stays.

        The sole admin account is never deleted.
        """
        user = self.store.get(User, user_id)
        if user is None:
            return False
        if user.role == ADMIN and self.session.query(User).filter_by(role=ADMIN).count() <= 1:
            logger.warning("refused to delete the only admin account %s", user_id)
            return False
        with self.store.transaction() as s:
            s.delete(user)
        logger.info("deleted user %s", user_id)
        return True

    # --- bulk replace ---
    def replace_teachers(self, records):
        """Replace all teachers, then resync accounts and project roles."""
        self._check_bulk_usernames(records, TEACHER)
        with self.store.transaction() as s:
            rows = self.store.replace_rows(s, Teacher, records)
            keep = [t.id for t in rows]
            for user in s.query(User).filter_by(role=TEACHER).all():
                if user.teacher_id not in keep:
                    s.delete(user)
            (s.query(ProjectTeacher)
                .filter(ProjectTeacher.teacher_id.notin_(keep))
                .delete(synchronize_session="fetch"))
            s.flush()
            for teacher in rows:
                self._sync_account(s, teacher, TEACHER, {"teacher_id": teacher.id})
        logger.info("replaced teachers with %d records", len(rows))
        return rows

    def replace_students(self, records):
        """Replace all students, then resync their accounts."""
        self._check_bulk_usernames(records, STUDENT)
        with self.store.transaction() as s:
            rows = self.store.replace_rows(s, Student, records)
            keep = [st.id for st in rows]
            for user in s.query(User).filter_by(role=STUDENT).all():
                if user.student_id not in keep:
                    s.delete(user)
            s.flush()
            for student in rows:
                self._sync_account(s, student, STUDENT, {"student_id": student.id})
        logger.info("replaced students with %d records", len(rows))
        return rows

    @staticmethod
    def _sync_account(session, profile, role, link):
        username = username_for(profile.email)
        user = session.query(User).filter_by(**link).first()
        if user is None:
            session.add(User(id=new_id(), username=username,
                             password=profile.national_id, role=role, **link))
        else:
            user.username = username
            user.password = profile.national_id
        session.flush()
