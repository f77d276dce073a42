"""Read-only summaries over the store, shaped as flat rows for CSV export."""
from sqlalchemy.orm import selectinload

from ..models import (Project, ProjectFormat, ProjectStatus, ProjectTeacher,
                      Student, Teacher)
from .grading import final_grades
from .store import EntityStore

RECENT_LIMIT = 5


def _assignment_label(pt):
    teacher = pt.teacher.name if pt.teacher else f"unknown ({pt.teacher_id})"
    role = pt.role.name if pt.role else f"unknown ({pt.role_id})"
    return f"{teacher} ({role})"


class Reports:
    def __init__(self, store: EntityStore):
        self.store = store

    def _projects(self):
        return (self.store.session.query(Project)
                .options(selectinload(Project.students),
                         selectinload(Project.assignments)
                         .selectinload(ProjectTeacher.teacher),
                         selectinload(Project.assignments)
                         .selectinload(ProjectTeacher.role))
                .order_by(Project.title)
                .all())

    def project_status_report(self):
        rows = []
        for p in self._projects():
            finals = final_grades(p)
            rows.append({
                "title": p.title,
                "status": self.store.lookup_name(ProjectStatus, p.status_id),
                "format": self.store.lookup_name(ProjectFormat, p.format_id),
                "presentation_date": p.presentation_date.isoformat() if p.presentation_date else "",
                "students": ", ".join(s.name for s in p.students) or "none",
                "teachers": "; ".join(_assignment_label(pt) for pt in p.assignments) or "none",
                "director_approved": p.director_approved,
                "final_written": finals.written,
                "final_presentation": finals.presentation,
            })
        return rows

    def teacher_workload_report(self):
        rows = []
        teachers = (self.store.session.query(Teacher)
                    .options(selectinload(Teacher.assignments)
                             .selectinload(ProjectTeacher.role))
                    .order_by(Teacher.name).all())
        for t in teachers:
            director = co_director = evaluator = 0
            for pt in t.assignments:
                if pt.role is None:
                    continue
                name = pt.role.name.lower()
                if "co-director" in name:
                    co_director += 1
                elif pt.role.approves:
                    director += 1
                elif pt.role.reviews:
                    evaluator += 1
            rows.append({
                "name": t.name,
                "email": t.email,
                "as_director": director,
                "as_co_director": co_director,
                "as_evaluator": evaluator,
                "total": len(t.assignments),
            })
        return rows

    def unassigned_students_report(self):
        students = (self.store.session.query(Student)
                    .filter(Student.project_id.is_(None))
                    .order_by(Student.name).all())
        return [{"name": s.name, "email": s.email} for s in students]

    def dashboard_stats(self):
        s = self.store.session
        recent = (s.query(Project)
                  .order_by(Project.presentation_date.desc())
                  .limit(RECENT_LIMIT).all())
        return {
            "projects": s.query(Project).count(),
            "students": s.query(Student).count(),
            "teachers": s.query(Teacher).count(),
            "unassigned_students": s.query(Student).filter(Student.project_id.is_(None)).count(),
            "recent_projects": [{
                "id": p.id,
                "title": p.title,
                "presentation_date": p.presentation_date.isoformat() if p.presentation_date else None,
                "status": self.store.lookup_name(ProjectStatus, p.status_id),
            } for p in recent],
        }

    def student_project_view(self, student_id):
        """What a student sees: their project, its status and its directors."""
        student = self.store.get(Student, student_id)
        if student is None:
            return None
        view = {"student": student.to_dict(), "project": None,
                "status": None, "directors": []}
        project = self.store.get(Project, student.project_id)
        if project is None:
            return view
        view["project"] = project.to_dict()
        view["status"] = self.store.lookup_name(ProjectStatus, project.status_id)
        view["directors"] = [pt.teacher.name for pt in project.assignments
                             if pt.role is not None and pt.role.approves
                             and pt.teacher is not None]
        finals = final_grades(project)
        view["final_grades"] = finals._asdict()
        return view
