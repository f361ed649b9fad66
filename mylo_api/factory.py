# -*- coding: utf-8 -*-
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from mylo_api.config import Config
from mylo_api.database import db

from mylo_api.services.auth_service import AuthService
from mylo_api.services.email_service import CodeSender, SendGridCodeMailer
from mylo_api.services.metrics import init_metrics
from mylo_api.services.request_context import init_request_context
from mylo_api.services.session_store import SessionStore, build_redis_client
from mylo_api.services.signin_service import SignInService
from mylo_api.services.structured_logging import init_logging
from mylo_api.middleware.error_handlers import register_error_handlers

CORS_HEADERS = ["Origin", "Content-Type", "Accept", "Authorization"]


def _migrate_db(app):
    """Run Alembic migrations to head using the app's DB URL."""
    from alembic import command
    from alembic.config import Config as AlembicConfig

    base_dir = Path(__file__).resolve().parent.parent
    cfg = AlembicConfig()  # in-memory config, avoid alembic.ini dependency
    cfg.set_main_option("script_location", str(base_dir / "migrations"))
    cfg.set_main_option("sqlalchemy.url", app.config["SQLALCHEMY_DATABASE_URI"].replace("%", "%%"))

    command.upgrade(cfg, "head")
    app.logger.info("Database migrations applied successfully")


def _init_services(app: Flask, session_store: Optional[SessionStore],
                   mailer: Optional[CodeSender]):
    """Wire the sign-in flow's collaborators and keep them on app.extensions."""
    if session_store is None:
        session_store = SessionStore(
            build_redis_client(app.config),
            code_ttl_seconds=app.config["SIGNIN_CODE_TTL_SECONDS"],
            session_ttl_seconds=app.config["SESSION_TTL_SECONDS"],
        )
    if mailer is None:
        mailer = SendGridCodeMailer(
            app.config["SENDGRID_API_KEY"],
            from_address=app.config["SENDGRID_FROM_ADDRESS"],
            from_name=app.config["SENDGRID_FROM_NAME"],
        )

    auth_service = AuthService(
        app.config["JWT_USER_SECRET_KEY"],
        session_store,
        token_ttl_seconds=app.config["TOKEN_TTL_SECONDS"],
    )
    signin_service = SignInService(
        session_store, mailer, auth_service, metrics=app.extensions.get("metrics"))

    app.extensions["session_store"] = session_store
    app.extensions["code_mailer"] = mailer
    app.extensions["auth_service"] = auth_service
    app.extensions["signin_service"] = signin_service


def create_app(overrides: Optional[dict] = None, *,
               session_store: Optional[SessionStore] = None,
               mailer: Optional[CodeSender] = None) -> Flask:
    """
    Build the API.

    ``overrides`` replaces config keys after the environment is read;
    ``session_store`` and ``mailer`` substitute the Redis and SendGrid
    collaborators (tests pass in-memory doubles).
    """
    app = Flask(__name__)
    app.url_map.strict_slashes = False

    # --- Core config ---
    app.config.from_object(Config())
    if overrides:
        app.config.update(overrides)

    # --- DB config ---
    db.init_app(app)

    # --- CORS, one origin per route group ---
    CORS(app, resources={
        r"/signup/*": {"origins": [app.config["SIGNUP_CORS_ORIGIN"]], "allow_headers": CORS_HEADERS},
        r"/signin/*": {"origins": [app.config["SIGNIN_CORS_ORIGIN"]], "allow_headers": CORS_HEADERS},
        r"/admin/*": {"origins": [app.config["ADMIN_CORS_ORIGIN"]], "allow_headers": CORS_HEADERS,
                      "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"]},
    })

    # --- Initialize observability ---
    init_request_context(app)
    init_logging(app)
    init_metrics(app)

    register_error_handlers(app)
    _init_services(app, session_store, mailer)

    # --- Mount blueprints ---
    from mylo_api.routes.admin import admin_bp
    from mylo_api.routes.health import health_bp
    from mylo_api.routes.signin import signin_bp
    from mylo_api.routes.signup import signup_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(signup_bp)
    app.register_blueprint(signin_bp)
    app.register_blueprint(admin_bp)

    @app.route("/", methods=["GET", "HEAD"])
    def root():
        return jsonify({"ok": True, "service": "mylo-api"}), 200

    # --- DB init ---
    with app.app_context():
        import mylo_api.models  # noqa: F401  register tables on db.metadata

        if app.config.get("TESTING") or app.config.get("MYLO_DB_AUTOCREATE"):
            db.create_all()
        elif app.config.get("MYLO_DB_MIGRATE_ON_START"):
            try:
                _migrate_db(app)
            except Exception as e:
                app.logger.error(f"Failed to run migrations: {e}")
                raise

    return app
