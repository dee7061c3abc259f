from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from flask import Flask, current_app, g, request
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import DBStorage

logger = logging.getLogger("api")

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Todo Auth API",
        "version": "1.0.0",
        "description": "Per-user to-do lists behind access/refresh token authentication.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def current_storage() -> DBStorage:
    """The DBStorage handle bound to the running app."""
    return current_app.extensions["storage"]


def configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.setLevel(level)

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.pop("request_started", None)
        elapsed = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info("%s %s %s %.1f ms", request.method, request.path, response.status_code, elapsed)
        return response


def create_app(config_name: str | None = None, test_config: Mapping[str, Any] | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `test_config` overrides individual settings after the config class is loaded.
    The app owns its DBStorage (app.extensions["storage"]); call
    app.extensions["storage"].dispose() to release it.
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    if test_config:
        app.config.update(test_config)

    if app.config["ACCESS_TOKEN_SECRET"] == app.config["REFRESH_TOKEN_SECRET"]:
        raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")

    configure_logging(app)

    # Credentials are needed so browsers send the refresh cookie cross-origin
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", ["*"])}},
        supports_credentials=True,
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()
    app.extensions["storage"] = storage

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .todos import bp as todos_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/user")
    app.register_blueprint(todos_bp, url_prefix="/api/todos")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Todo Auth API",
            "docs": "/apidocs/",
            "health": "/api/health",
        }, 200

    return app
