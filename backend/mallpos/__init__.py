# backend/mallpos/__init__.py
import logging

from flask import Flask, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from .config import Config, engine_options_for
from .extensions import db, migrate

LOCAL_DEV_ORIGINS = {
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
}


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger("werkzeug").setLevel(level)


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)
        if "SQLALCHEMY_DATABASE_URI" in test_config and "SQLALCHEMY_ENGINE_OPTIONS" not in test_config:
            app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options_for(
                app.config["SQLALCHEMY_DATABASE_URI"], app.config["DB_TIMEOUT_SECONDS"]
            )

    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.vendors import vendors_bp
    from .routes.purchases import purchases_bp
    from .routes.bills import bills_bp
    from .routes.customers import customers_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(vendors_bp)
    app.register_blueprint(purchases_bp)
    app.register_blueprint(bills_bp)
    app.register_blueprint(customers_bp)

    @app.errorhandler(SQLAlchemyError)
    def handle_datastore_error(exc):
        # Nothing from a failed unit may leak into the next request
        db.session.rollback()
        app.logger.exception("Datastore operation failed on %s %s", request.method, request.path)
        return jsonify({"error": "Datastore unavailable"}), 500

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = set(LOCAL_DEV_ORIGINS)
        if app.config.get("FRONTEND_URL"):
            allowed_origins.add(app.config["FRONTEND_URL"].rstrip("/"))
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
