from ..extensions import db
from .base import RecordMixin

GRADE_MIN = 0.0
GRADE_MAX = 5.0

class Project(RecordMixin, db.Model):
    __tablename__ = "project"
    title = db.Column(db.String(256), nullable=False)
    presentation_date = db.Column(db.Date)
    files_url = db.Column(db.String(512))
    status_id = db.Column(db.String(36))
    format_id = db.Column(db.String(36))
    director_approved = db.Column(db.Boolean, nullable=False, default=False)
    # reviewer slots, each 0.0..5.0 or None until graded
    written_grade_1 = db.Column(db.Float)
    presentation_grade_1 = db.Column(db.Float)
    written_grade_2 = db.Column(db.Float)
    presentation_grade_2 = db.Column(db.Float)

    students = db.relationship(
        "Student", viewonly=True, order_by="Student.name",
        primaryjoin="foreign(Student.project_id) == Project.id")
    assignments = db.relationship(
        "ProjectTeacher", viewonly=True, order_by="ProjectTeacher.id",
        primaryjoin="foreign(ProjectTeacher.project_id) == Project.id")

    def slot_grades(self, slot):
        return (getattr(self, f"written_grade_{slot}"),
                getattr(self, f"presentation_grade_{slot}"))

class ProjectTeacher(RecordMixin, db.Model):
    __tablename__ = "project_teacher"
    project_id = db.Column(db.String(36), nullable=False, index=True)
    teacher_id = db.Column(db.String(36), nullable=False, index=True)
    role_id = db.Column(db.String(36), nullable=False)
    __table_args__ = (
        db.UniqueConstraint("project_id", "teacher_id", name="uq_project_teacher"),
    )

    teacher = db.relationship(
        "Teacher", viewonly=True,
        primaryjoin="foreign(ProjectTeacher.teacher_id) == Teacher.id")
    role = db.relationship(
        "TeacherRole", viewonly=True,
        primaryjoin="foreign(ProjectTeacher.role_id) == TeacherRole.id")
