import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, validate_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from services.session_manager import SessionManager

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Token Session API",
        "version": "1.0.0",
        "description": "Signup, login, access-token renewal and logout with JWT access/refresh token pairs.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
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

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    ``overrides`` is applied on top of the selected config class (tests use it
    to switch token lifetimes or rotation without touching the environment).
    """
    app = Flask(__name__)

    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)
    validate_config(app.config)
    configure_logging(app)

    # The refresh cookie is cross-origin for the browser client, so credentials are allowed
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS")}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE"],
        max_age=36000,
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    storage.reload(app.config["DATABASE_URL"])
    app.extensions["session_manager"] = SessionManager.from_config(storage, app.config)

    from .health import bp as health_bp
    from .auth import bp as auth_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Hello to the JWT based authentication system.",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    return app
