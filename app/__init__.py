import logging

from flask import Flask, jsonify
from .extensions import db, migrate, login_manager

def register_error_handlers(app):
    from .services import StoreError

    @app.errorhandler(StoreError)
    def store_conflict(err):
        return jsonify(error=str(err)), 409

    for code in (400, 401, 403, 404, 409):
        @app.errorhandler(code)
        def http_error(err, code=code):
            return jsonify(error=err.description), code

def create_app(config_object="config.Config"):
    app = Flask(__name__)
    app.config.from_object(config_object)
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from . import models
    from .models.user import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify(error="login required"), 401

    from .blueprints.auth import bp as auth_bp
    from .blueprints.admin import bp as admin_bp
    from .blueprints.teacher import bp as teacher_bp
    from .blueprints.student import bp as student_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(teacher_bp, url_prefix="/teacher")
    app.register_blueprint(student_bp, url_prefix="/student")
    register_error_handlers(app)

    with app.app_context():
        db.create_all()
        if app.config.get("SEED_ON_STARTUP"):
            from .services import EntityStore
            from .services.seed import seed_if_empty
            seed_if_empty(EntityStore(db.session))

    return app
