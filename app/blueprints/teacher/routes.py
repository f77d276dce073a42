from flask import abort, jsonify, request
from flask_login import current_user, login_required

from app.blueprints.auth.routes import role_required
from ...models import Project, ProjectTeacher
from ...services import final_grades, get_engine
from . import bp

def project_payload(p):
    engine = get_engine()
    permission = engine.authz.can_grade_project(current_user, p.id)
    out = p.to_dict()
    out["final_grades"] = final_grades(p)._asdict()
    out["can_edit"] = engine.authz.can_edit_project(current_user, p.id)
    out["can_grade"] = permission.can_grade
    out["reviewer_label"] = permission.reviewer_label
    return out

def get_project_or_404(project_id):
    p = get_engine().store.get(Project, project_id)
    if p is None:
        abort(404, "Project does not exist")
    return p

@bp.get("/projects")
@login_required
@role_required("teacher", "admin")
def my_projects():
    q = Project.query
    if not current_user.is_admin:
        q = q.join(ProjectTeacher, ProjectTeacher.project_id == Project.id).filter(
            ProjectTeacher.teacher_id == current_user.teacher_id)
    items = q.order_by(Project.presentation_date.desc()).all()
    return jsonify([project_payload(p) for p in items])

@bp.get("/projects/<project_id>")
@login_required
@role_required("teacher", "admin")
def project_detail(project_id):
    p = get_project_or_404(project_id)
    if not get_engine().authz.can_view_project(current_user, project_id):
        abort(403)
    return jsonify(project_payload(p))

@bp.post("/projects/<project_id>")
@login_required
@role_required("teacher", "admin")
def update_project(project_id):
    get_project_or_404(project_id)
    data = {k: (request.form.get(k) or "").strip() for k in request.form}
    if "title" in data and not data["title"]:
        abort(400, "Title is required")
    try:
        p = get_engine().grading.update_project_details(current_user, project_id, data)
    except ValueError:
        abort(400, "presentation_date must be YYYY-MM-DD")
    if p is None:
        abort(403)
    return jsonify(project_payload(p))

@bp.post("/projects/<project_id>/approval")
@login_required
@role_required("teacher", "admin")
def set_approval(project_id):
    get_project_or_404(project_id)
    approved = request.form.get("approved", "true").lower() in ("1", "true", "yes", "on")
    p = get_engine().grading.set_approval(current_user, project_id, approved)
    if p is None:
        abort(403)
    return jsonify(project_payload(p))

@bp.post("/projects/<project_id>/grades")
@login_required
@role_required("teacher", "admin")
def submit_grades(project_id):
    try:
        outcome = get_engine().grading.submit_grades(
            current_user, project_id,
            written=request.form.get("written"),
            presentation=request.form.get("presentation"))
    except ValueError:
        abort(400, "Grades must be numbers")
    if outcome.reason == "not_found":
        abort(404, "Project does not exist")
    if outcome.reason == "forbidden":
        abort(403)
    if outcome.reason == "not_approved":
        return jsonify(error="The project has not been approved by its director"), 409
    p = get_engine().store.get(Project, project_id)
    out = project_payload(p)
    out["slot"] = outcome.slot
    return jsonify(out)
