# backend/wakalead/__init__.py

import time

from flask import Flask, current_app, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import Config

db = SQLAlchemy()


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Init extensions
    db.init_app(app)

    # CORS: the dashboard is served from another origin
    CORS(
        app,
        resources={r"/api/*": {"origins": "*"}},
        send_wildcard=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    from .sessions import SessionManager
    from .wakatime import WakaTimeClient

    app.extensions["wakatime"] = WakaTimeClient.from_config(app.config)
    app.extensions["sessions"] = SessionManager(ttl_seconds=app.config["SESSION_TTL_SECONDS"])
    app.extensions["sleep"] = time.sleep

    _register_error_handlers(app)

    # -----------------------------
    # IMPORT BLUEPRINTS (all routes)
    # -----------------------------
    from .routes.auth_routes import auth_bp
    from .routes.dashboard_routes import dashboard_bp
    from .routes.leaderboard_routes import leaderboard_bp
    from .routes.admin_routes import admin_bp
    from .routes.jobs_routes import jobs_bp

    # -----------------------------
    # REGISTER BLUEPRINTS
    # -----------------------------
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(dashboard_bp, url_prefix="/api")
    app.register_blueprint(leaderboard_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(jobs_bp, url_prefix="/api/jobs")

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    from .cli import register_commands

    register_commands(app)

    # -----------------------------
    # DB init
    # -----------------------------
    with app.app_context():
        from . import models  # noqa: F401

        db.create_all()

    return app


def _register_error_handlers(app):
    from .errors import ApiError

    @app.errorhandler(ApiError)
    def api_error(exc):
        return jsonify({"error": exc.message}), exc.status_code

    @app.errorhandler(HTTPException)
    def http_error(exc):
        message = "Not found" if exc.code == 404 else exc.description
        return jsonify({"error": message}), exc.code

    @app.errorhandler(SQLAlchemyError)
    def database_error(exc):
        # str(exc) includes bound parameters, tokens among them
        db.session.rollback()
        current_app.logger.error(f"Database error: {type(exc).__name__}")
        return jsonify({"error": "Database error"}), 500

    @app.errorhandler(Exception)
    def unhandled_error(exc):
        db.session.rollback()
        current_app.logger.exception(f"Unhandled error: {exc}")
        return jsonify({"error": str(exc) or "Internal server error"}), 500


# -----------------------------
# Service accessors
# -----------------------------
def get_wakatime_client():
    return current_app.extensions["wakatime"]


def get_session_manager():
    return current_app.extensions["sessions"]


def get_sync_service():
    from .sync import SyncService

    return SyncService(
        get_wakatime_client(),
        delay_seconds=current_app.config["SYNC_USER_DELAY_SECONDS"],
        sleep=current_app.extensions["sleep"],
    )
