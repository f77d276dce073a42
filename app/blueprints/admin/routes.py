from flask import Response, abort, jsonify, request
from flask_login import login_required
from sqlalchemy.exc import IntegrityError

from app.blueprints.auth.routes import role_required
from ...models import (Program, Project, ProjectFormat, ProjectStatus,
                       Student, Teacher, TeacherRole, User)
from ...services import KINDS, csv_codec, get_engine
from . import bp

LOOKUPS = {
    "statuses": ProjectStatus,
    "formats": ProjectFormat,
    "teacher_roles": TeacherRole,
    "programs": Program,
}

REPORTS = {
    "project_status": "project_status_report",
    "teacher_workload": "teacher_workload_report",
    "unassigned_students": "unassigned_students_report",
}

def form_fields(*names):
    return {n: (request.form.get(n) or "").strip() for n in names if n in request.form}

def require(data, *names):
    missing = [n for n in names if not data.get(n)]
    if missing:
        abort(400, f"Required: {', '.join(missing)}")

def reject_blank(data, *names):
    blank = [n for n in names if n in data and not data[n]]
    if blank:
        abort(400, f"Cannot be empty: {', '.join(blank)}")

def rows(items):
    return jsonify([i.to_dict() for i in items])

# ---------- Teachers ----------
@bp.get("/teachers")
@login_required
@role_required("admin")
def teachers():
    return rows(Teacher.query.order_by(Teacher.name).all())

@bp.post("/teachers")
@login_required
@role_required("admin")
def create_teacher():
    data = form_fields("name", "email", "national_id")
    require(data, "name", "email", "national_id")
    t = get_engine().identity.create_teacher(data)
    return jsonify(t.to_dict()), 201

@bp.post("/teachers/<tid>/update")
@login_required
@role_required("admin")
def update_teacher(tid):
    data = form_fields("name", "email", "national_id")
    reject_blank(data, "name", "email", "national_id")
    data["id"] = tid
    t = get_engine().identity.update_teacher(data)
    if t is None:
        abort(404, "Teacher not found")
    return jsonify(t.to_dict())

@bp.post("/teachers/<tid>/delete")
@login_required
@role_required("admin")
def delete_teacher(tid):
    get_engine().identity.delete_teacher(tid)
    return jsonify(ok=True)

# ---------- Students ----------
@bp.get("/students")
@login_required
@role_required("admin")
def students():
    return rows(Student.query.order_by(Student.name).all())

@bp.post("/students")
@login_required
@role_required("admin")
def create_student():
    data = form_fields("name", "email", "national_id", "program_id", "project_id")
    require(data, "name", "email", "national_id")
    s = get_engine().identity.create_student(data)
    return jsonify(s.to_dict()), 201

@bp.post("/students/<sid>/update")
@login_required
@role_required("admin")
def update_student(sid):
    data = form_fields("name", "email", "national_id", "program_id", "project_id")
    reject_blank(data, "name", "email", "national_id")
    data["id"] = sid
    s = get_engine().identity.update_student(data)
    if s is None:
        abort(404, "Student not found")
    return jsonify(s.to_dict())

@bp.post("/students/<sid>/delete")
@login_required
@role_required("admin")
def delete_student(sid):
    get_engine().identity.delete_student(sid)
    return jsonify(ok=True)

# ---------- Users ----------
@bp.get("/users")
@login_required
@role_required("admin")
def users():
    items = User.query.order_by(User.role, User.username).all()
    return jsonify([{k: v for k, v in u.to_dict().items() if k != "password"}
                    for u in items])

@bp.post("/users/<uid>/delete")
@login_required
@role_required("admin")
def delete_user(uid):
    deleted = get_engine().identity.delete_user(uid)
    return jsonify(deleted=deleted)

# ---------- Lookups ----------
def lookup_kind(kind):
    model = LOOKUPS.get(kind)
    if model is None:
        abort(404, "Unknown lookup")
    return model

@bp.get("/lookups/<kind>")
@login_required
@role_required("admin")
def lookups(kind):
    return rows(get_engine().store.list(lookup_kind(kind)))

@bp.post("/lookups/<kind>")
@login_required
@role_required("admin")
def create_lookup(kind):
    data = form_fields("name")
    require(data, "name")
    item = get_engine().store.create(lookup_kind(kind), data)
    return jsonify(item.to_dict()), 201

@bp.post("/lookups/<kind>/<item_id>/update")
@login_required
@role_required("admin")
def update_lookup(kind, item_id):
    data = form_fields("name")
    require(data, "name")
    data["id"] = item_id
    item = get_engine().store.update(lookup_kind(kind), data)
    if item is None:
        abort(404, "Not found")
    return jsonify(item.to_dict())

@bp.post("/lookups/<kind>/<item_id>/delete")
@login_required
@role_required("admin")
def delete_lookup(kind, item_id):
    # projects and assignments keep the dangling id
    get_engine().store.delete(lookup_kind(kind), item_id)
    return jsonify(ok=True)

# ---------- Projects ----------
@bp.get("/projects")
@login_required
@role_required("admin")
def projects():
    return rows(Project.query.order_by(Project.presentation_date.desc()).all())

@bp.post("/projects")
@login_required
@role_required("admin")
def create_project():
    data = form_fields("title", "presentation_date", "files_url", "status_id", "format_id")
    require(data, "title", "presentation_date", "status_id", "format_id")
    try:
        p = get_engine().store.create(Project, data)
    except ValueError:
        abort(400, "presentation_date must be YYYY-MM-DD")
    return jsonify(p.to_dict()), 201

@bp.post("/projects/<pid>/delete")
@login_required
@role_required("admin")
def delete_project(pid):
    get_engine().store.delete_project(pid)
    return jsonify(ok=True)

@bp.post("/projects/<pid>/teachers")
@login_required
@role_required("admin")
def assign_teacher(pid):
    data = form_fields("teacher_id", "role_id")
    require(data, "teacher_id", "role_id")
    store = get_engine().store
    if store.get(Project, pid) is None or store.get(Teacher, data["teacher_id"]) is None:
        abort(404, "The project or teacher does not exist")
    pt = store.assign_teacher(pid, data["teacher_id"], data["role_id"])
    return jsonify(pt.to_dict()), 201

@bp.post("/assignments/<aid>/delete")
@login_required
@role_required("admin")
def unassign_teacher(aid):
    get_engine().store.unassign_teacher(aid)
    return jsonify(ok=True)

# ---------- Bulk transfer ----------
@bp.get("/export/<kind>")
@login_required
@role_required("admin")
def export_kind(kind):
    model = KINDS.get(kind)
    if model is None:
        abort(404, "Unknown record set")
    text = csv_codec.encode(r.to_dict() for r in get_engine().store.list(model))
    return Response(text, mimetype="text/csv",
                    headers={"Content-Disposition": f"attachment; filename={kind}.csv"})

@bp.post("/import/<kind>")
@login_required
@role_required("admin")
def import_kind(kind):
    model = KINDS.get(kind)
    if model is None:
        abort(404, "Unknown record set")
    if model is User:
        abort(400, "Accounts are derived from teachers and students")
    records = csv_codec.decode(request.get_data(as_text=True))
    engine = get_engine()
    try:
        if model is Teacher:
            result = engine.identity.replace_teachers(records)
        elif model is Student:
            result = engine.identity.replace_students(records)
        elif model is Project:
            result = engine.store.replace_projects(records)
        else:
            result = engine.store.replace_all(model, records)
    except ValueError as e:
        abort(400, str(e))
    except IntegrityError:
        # the store already rolled back, the previous records are intact
        abort(409, f"Import of {kind} repeats a value that must be unique")
    return jsonify(imported=len(result))

@bp.get("/reports/<name>")
@login_required
@role_required("admin")
def report(name):
    method = REPORTS.get(name)
    if method is None:
        abort(404, "Unknown report")
    data = getattr(get_engine().reports, method)()
    if request.args.get("format") == "csv":
        return Response(csv_codec.encode(data), mimetype="text/csv",
                        headers={"Content-Disposition": f"attachment; filename={name}.csv"})
    return jsonify(data)

@bp.get("/dashboard")
@login_required
@role_required("admin")
def dashboard():
    return jsonify(get_engine().reports.dashboard_stats())
