from app.models import Project, ProjectStatus
from app.services import Reports


def test_project_status_report(store):
    rows = {r["title"]: r for r in Reports(store).project_status_report()}
    p1 = rows["Predictive Maintenance with AI"]
    assert p1["status"] == "In Progress"
    assert p1["format"] == "Software Project"
    assert p1["students"] == "Alice Johnson, Bob Williams"
    assert p1["teachers"] == "Dr. Eleanor Vance (Director); Prof. Ben Carter (Evaluator 1)"
    assert p1["final_written"] is None
    assert rows["Quantum Computing for Drug Discovery"]["teachers"] == "none"


def test_report_renders_deleted_lookup_as_unknown(store):
    store.delete(ProjectStatus, "status-2")
    rows = {r["title"]: r for r in Reports(store).project_status_report()}
    assert rows["Predictive Maintenance with AI"]["status"] == "unknown (status-2)"


def test_report_includes_final_grades(store):
    store.update(Project, {"id": "project-1", "written_grade_1": 4.0,
                           "presentation_grade_2": 3.0})
    rows = {r["title"]: r for r in Reports(store).project_status_report()}
    assert rows["Predictive Maintenance with AI"]["final_written"] == 4.0
    assert rows["Predictive Maintenance with AI"]["final_presentation"] == 3.0


def test_teacher_workload_report(store):
    store.assign_teacher("project-2", "teacher-3", "role-2")
    store.assign_teacher("project-2", "teacher-2", "role-4")
    rows = {r["name"]: r for r in Reports(store).teacher_workload_report()}
    assert rows["Dr. Eleanor Vance"]["as_director"] == 1
    assert rows["Dr. Olivia Chen"]["as_co_director"] == 1
    assert rows["Prof. Ben Carter"]["as_evaluator"] == 2
    assert rows["Prof. Ben Carter"]["total"] == 2


def test_unassigned_students_report(store):
    assert Reports(store).unassigned_students_report() == [
        {"name": "Diana Miller", "email": "diana.m@student.edu"},
    ]


def test_dashboard_stats(store):
    stats = Reports(store).dashboard_stats()
    assert (stats["projects"], stats["students"], stats["teachers"]) == (2, 4, 3)
    assert stats["unassigned_students"] == 1
    assert stats["recent_projects"][0]["id"] == "project-2"


def test_student_project_view(store):
    view = Reports(store).student_project_view("student-1")
    assert view["project"]["id"] == "project-1"
    assert view["status"] == "In Progress"
    assert view["directors"] == ["Dr. Eleanor Vance"]


def test_student_without_project(store):
    view = Reports(store).student_project_view("student-4")
    assert view["project"] is None
    assert view["directors"] == []
    assert Reports(store).student_project_view("nobody") is None
