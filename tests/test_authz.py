import pytest

from app.models import TeacherRole, User
from app.models.lookup import role_capabilities


def user(store, user_id):
    return store.get(User, user_id)


@pytest.mark.parametrize("name, expected", [
    ("Director", (True, False, None)),
    ("Co-Director", (True, False, None)),
    ("CO-DIRECTOR", (True, False, None)),
    ("Evaluator 1", (False, True, 1)),
    ("Evaluador 2", (False, True, 2)),
    ("Reviewer", (False, True, None)),
    ("Secretary", (False, False, None)),
    ("", (False, False, None)),
])
def test_role_capabilities(name, expected):
    assert role_capabilities(name) == expected


def test_admin_can_edit_any_project(authorizer, store):
    admin = user(store, "user-admin")
    assert authorizer.can_edit_project(admin, "project-1")
    assert authorizer.can_edit_project(admin, "project-2")
    assert authorizer.can_edit_project(admin, "no-such-project")


def test_director_can_edit(authorizer, store):
    assert authorizer.can_edit_project(user(store, "user-teacher-1"), "project-1")
    assert not authorizer.can_edit_project(user(store, "user-teacher-1"), "project-2")


def test_co_director_can_edit(authorizer, store):
    store.assign_teacher("project-2", "teacher-3", "role-2")
    assert authorizer.can_edit_project(user(store, "user-teacher-3"), "project-2")


def test_evaluator_cannot_edit(authorizer, store):
    assert not authorizer.can_edit_project(user(store, "user-teacher-2"), "project-1")


def test_students_never_edit_or_grade(authorizer, store):
    student = user(store, "user-student-1")
    assert not authorizer.can_edit_project(student, "project-1")
    assert authorizer.can_grade_project(student, "project-1") == (False, None, None)


def test_anonymous_is_denied(authorizer):
    assert not authorizer.can_edit_project(None, "project-1")
    assert not authorizer.can_grade_project(None, "project-1").can_grade


def test_evaluator_1_grades_in_slot_1(authorizer, store):
    perm = authorizer.can_grade_project(user(store, "user-teacher-2"), "project-1")
    assert perm.can_grade
    assert perm.reviewer_label == "Evaluator 1"
    assert perm.slot == 1


def test_admin_grades_with_admin_label(authorizer, store):
    perm = authorizer.can_grade_project(user(store, "user-admin"), "project-2")
    assert (perm.can_grade, perm.reviewer_label) == (True, "admin")


def test_director_cannot_grade(authorizer, store):
    perm = authorizer.can_grade_project(user(store, "user-teacher-1"), "project-1")
    assert not perm.can_grade
    assert perm.reviewer_label is None


def test_project_role_names(authorizer, store):
    assert authorizer.project_role_names(user(store, "user-teacher-1"), "project-1") == {"Director"}
    assert authorizer.project_role_names(user(store, "user-teacher-3"), "project-1") == set()
    assert authorizer.project_role_names(user(store, "user-admin"), "project-1") == set()


def test_renaming_role_changes_capabilities(authorizer, store):
    store.update(TeacherRole, {"id": "role-3", "name": "Director"})
    teacher2 = user(store, "user-teacher-2")
    assert authorizer.can_edit_project(teacher2, "project-1")
    assert not authorizer.can_grade_project(teacher2, "project-1").can_grade


def test_deleted_role_grants_nothing(authorizer, store):
    store.delete(TeacherRole, "role-1")
    assert not authorizer.can_edit_project(user(store, "user-teacher-1"), "project-1")


def test_can_view_project(authorizer, store):
    assert authorizer.can_view_project(user(store, "user-teacher-2"), "project-1")
    assert not authorizer.can_view_project(user(store, "user-teacher-3"), "project-1")
    assert authorizer.can_view_project(user(store, "user-student-1"), "project-1")
    assert not authorizer.can_view_project(user(store, "user-student-1"), "project-2")
    assert authorizer.can_view_project(user(store, "user-admin"), "project-2")


def test_can_manage_people(authorizer, store):
    assert authorizer.can_manage_people(user(store, "user-admin"))
    assert not authorizer.can_manage_people(user(store, "user-teacher-1"))
