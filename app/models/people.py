from ..extensions import db
from .base import RecordMixin

class Teacher(RecordMixin, db.Model):
    __tablename__ = "teacher"
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(128), nullable=False)
    national_id = db.Column(db.String(32), nullable=False)  # doubles as login password

    assignments = db.relationship(
        "ProjectTeacher", viewonly=True, order_by="ProjectTeacher.id",
        primaryjoin="foreign(ProjectTeacher.teacher_id) == Teacher.id")

class Student(RecordMixin, db.Model):
    __tablename__ = "student"
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(128), nullable=False)
    national_id = db.Column(db.String(32), nullable=False)
    program_id = db.Column(db.String(36))
    project_id = db.Column(db.String(36), index=True)  # None = not assigned yet
