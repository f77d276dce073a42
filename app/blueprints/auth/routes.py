import time
from functools import wraps

from flask import abort, current_app, jsonify, request, session
from flask_login import current_user, login_required, login_user, logout_user

from ...services import get_engine, session_expired
from . import bp

LOGIN_AT = "login_at"

def role_required(*roles):
    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated or current_user.role not in roles:
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return deco

def user_payload(u):
    return {"id": u.id, "username": u.username, "role": u.role,
            "teacher_id": u.teacher_id, "student_id": u.student_id}

@bp.before_app_request
def expire_stale_login():
    if not current_user.is_authenticated:
        return
    lifetime = current_app.config["PERMANENT_SESSION_LIFETIME"]
    if session_expired(session.get(LOGIN_AT), lifetime=lifetime):
        logout_user()
        session.pop(LOGIN_AT, None)

@bp.post("/login")
def login():
    username = (request.form.get("username") or "").strip()
    password = request.form.get("password", "")
    u = get_engine().identity.authenticate(username, password)
    if u is None:
        return jsonify(error="Incorrect username or password"), 401
    session.permanent = True
    login_user(u)
    session[LOGIN_AT] = time.time()
    return jsonify(user_payload(u))

@bp.get("/logout")
@login_required
def logout():
    logout_user()
    session.pop(LOGIN_AT, None)
    return jsonify(ok=True)

@bp.get("/me")
@login_required
def me():
    return jsonify(user_payload(current_user))
