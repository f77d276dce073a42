from flask_login import UserMixin
from ..extensions import db
from .base import RecordMixin

ADMIN = "admin"
TEACHER = "teacher"
STUDENT = "student"
ROLES = (ADMIN, TEACHER, STUDENT)

class User(UserMixin, RecordMixin, db.Model):
    __tablename__ = "user"
    username = db.Column(db.String(64), unique=True, nullable=False)
    password = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(16), nullable=False)
    teacher_id = db.Column(db.String(36), index=True)
    student_id = db.Column(db.String(36), index=True)

    @property
    def is_admin(self):
        return self.role == ADMIN

    @property
    def is_teacher(self):
        return self.role == TEACHER

    @property
    def is_student(self):
        return self.role == STUDENT
