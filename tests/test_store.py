import logging
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from app.models import (Project, ProjectStatus, ProjectTeacher, Student,
                        Teacher, TeacherRole)
from app.services import DuplicateAssignmentError


def test_create_generates_unique_ids(store):
    a = store.create(ProjectStatus, {"name": "Draft"})
    b = store.create(ProjectStatus, {"name": "Draft"})
    assert a.id and b.id and a.id != b.id
    assert store.get(ProjectStatus, a.id).name == "Draft"


def test_create_ignores_caller_id(store):
    s = store.create(ProjectStatus, {"id": "status-1", "name": "Other"})
    assert s.id != "status-1"
    assert store.get(ProjectStatus, "status-1").name == "Proposed"


def test_create_coerces_iso_dates(store):
    p = store.create(Project, {"title": "Graph mining", "presentation_date": "2025-03-01",
                               "status_id": "status-1", "format_id": "format-1"})
    assert store.get(Project, p.id).presentation_date == date(2025, 3, 1)


def test_update_missing_id_is_noop(store):
    before = len(store.list(ProjectStatus))
    assert store.update(ProjectStatus, {"id": "nope", "name": "X"}) is None
    assert len(store.list(ProjectStatus)) == before


def test_update_overwrites_fields(store):
    store.update(ProjectStatus, {"id": "status-2", "name": "Ongoing"})
    assert store.get(ProjectStatus, "status-2").name == "Ongoing"


def test_delete_refuses_kinds_with_cascades(store):
    with pytest.raises(TypeError):
        store.delete(Project, "project-1")
    assert store.get(Project, "project-1") is not None


def test_delete_missing_lookup_is_noop(store):
    store.delete(ProjectStatus, "nope")
    assert len(store.list(ProjectStatus)) == 5


def test_deleting_lookup_leaves_dangling_ids(store):
    store.delete(ProjectStatus, "status-2")
    project = store.get(Project, "project-1")
    assert project.status_id == "status-2"
    assert store.lookup_name(ProjectStatus, project.status_id) == "unknown (status-2)"


def test_delete_project_cascades(store):
    store.delete_project("project-1")
    assert store.get(Project, "project-1") is None
    assert all(s.project_id != "project-1" for s in store.list(Student))
    assert store.get(Student, "student-1").project_id is None
    assert store.assignments_for(project_id="project-1") == []
    # untouched
    assert store.get(Student, "student-3").project_id == "project-2"
    assert len(store.list(Teacher)) == 3


def test_assign_teacher_rejects_second_role_on_same_project(store):
    with pytest.raises(DuplicateAssignmentError):
        store.assign_teacher("project-1", "teacher-1", "role-3")
    assert len(store.assignments_for(project_id="project-1", teacher_id="teacher-1")) == 1


def test_assign_teacher_on_other_project(store):
    pt = store.assign_teacher("project-2", "teacher-1", "role-4")
    assert store.get(ProjectTeacher, pt.id).role_id == "role-4"
    store.unassign_teacher(pt.id)
    assert store.get(ProjectTeacher, pt.id) is None


def test_replace_all_overwrites_and_coerces(store):
    rows = store.replace_all(Project, [
        {"id": "p-a", "title": "A", "presentation_date": "2025-05-05",
         "files_url": "", "status_id": "status-1", "format_id": "format-1",
         "director_approved": True, "written_grade_1": "4.5", "unknown": "x"},
        {"title": "B", "status_id": "status-1", "format_id": "format-2",
         "director_approved": "false"},
    ])
    assert len(rows) == 2
    assert {p.title for p in store.list(Project)} == {"A", "B"}
    a = store.get(Project, "p-a")
    assert a.director_approved is True
    assert a.written_grade_1 == 4.5
    assert a.files_url is None
    assert a.presentation_date == date(2025, 5, 5)


def test_replace_all_same_ids(store):
    statuses = [s.to_dict() for s in store.list(ProjectStatus)]
    statuses[0]["name"] = "Renamed"
    store.replace_all(ProjectStatus, statuses)
    assert store.get(ProjectStatus, statuses[0]["id"]).name == "Renamed"
    assert len(store.list(ProjectStatus)) == len(statuses)


def test_replace_all_recomputes_role_capabilities(store):
    store.replace_all(TeacherRole, [
        {"id": "r-x", "name": "Evaluator 2", "approves": True, "reviews": False},
    ])
    role = store.get(TeacherRole, "r-x")
    assert role.reviews is True
    assert role.approves is False
    assert role.reviewer_slot == 2


def test_replace_projects_detaches_vanished_projects(store):
    keep = store.get(Project, "project-2").to_dict()
    store.replace_projects([keep])
    assert store.get(Student, "student-1").project_id is None
    assert store.get(Student, "student-3").project_id == "project-2"
    assert store.assignments_for(project_id="project-1") == []


def test_failed_write_rolls_back_and_reraises(store, caplog):
    with caplog.at_level(logging.ERROR, logger="app.services.store"):
        with pytest.raises(IntegrityError):
            store.create(ProjectTeacher, {"project_id": "project-1",
                                          "teacher_id": "teacher-1",
                                          "role_id": "role-3"})
    assert "rolled back" in caplog.text
    # the session is usable and the earlier records are unchanged
    assert {pt.id for pt in store.list(ProjectTeacher)} == {"pt-1", "pt-2"}
    assert store.get(ProjectTeacher, "pt-1").role_id == "role-1"
    store.update(ProjectStatus, {"id": "status-1", "name": "Draft"})
    assert store.get(ProjectStatus, "status-1").name == "Draft"
