# backend/shopdesk/__init__.py
from flask import Flask, request

from .config import Config
from .extensions import db, migrate, shop


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401
    from .services.persistence import SqlCollectionPersistence
    shop.init_app(app, SqlCollectionPersistence(db))

    # Operator PIN: keep only the bcrypt hash
    from .services.auth_service import hash_pin
    pin = app.config.pop("OPERATOR_PIN", None)
    if app.config.get("PIN_GATE_ENABLED", True) and not app.config.get("OPERATOR_PIN_HASH"):
        app.config["OPERATOR_PIN_HASH"] = hash_pin(pin, rounds=app.config.get("PIN_HASH_ROUNDS", 12))

    # Recognition service and local barcode decoder
    from .services.recognition_service import RecognitionClient
    from .services.barcode_service import load_native_detector
    app.extensions.setdefault("recognition", RecognitionClient.from_config(app.config))
    app.extensions.setdefault(
        "barcode_detector",
        load_native_detector(app.config.get("NATIVE_BARCODE_DETECTION", True)),
    )
    if not app.extensions["recognition"].configured:
        app.logger.warning("RECOGNITION_API_KEY not set; photo recognition is unavailable")

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.pos import pos_bp
    from .routes.products import products_bp
    from .routes.clients import clients_bp
    from .routes.financial import financial_bp
    from .routes.captures import captures_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(pos_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(financial_bp)
    app.register_blueprint(captures_bp)
    app.register_blueprint(reports_bp)

    allowed_origins = frozenset(app.config.get("CORS_ALLOWED_ORIGINS", ()))

    @app.after_request
    def allow_configured_origins(response):
        origin = request.headers.get("Origin")
        if origin and origin in allowed_origins:
            response.headers.update({
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Headers": "Authorization, Content-Type",
                "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
            })
            response.vary.add("Origin")
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
