from flask import abort, jsonify
from flask_login import current_user, login_required

from app.blueprints.auth.routes import role_required
from ...services import get_engine
from . import bp

@bp.get("/project")
@login_required
@role_required("student")
def my_project():
    view = get_engine().reports.student_project_view(current_user.student_id)
    if view is None:
        abort(404, "Student profile not found")
    return jsonify(view)
