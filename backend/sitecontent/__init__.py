import os

from flask import Flask, send_from_directory
from flask_swagger_ui import get_swaggerui_blueprint

from .config import config_by_name, source_dirs_for
from .extensions import db, migrate, jwt
from .api.v1 import v1_bp
from .errors import register_error_handlers
from .log_config import configure_logging

OPENAPI_DIR = os.path.join(os.path.dirname(__file__), "api", "v1")
OPENAPI_FILE = "content_openapi.yaml"
OPENAPI_URL = "/openapi/content.yaml"
SWAGGER_URL = "/swagger"

TRANSLATOR_KEY = "sitecontent.translator"


def create_app(config_name: str = "development", overrides: dict | None = None, translator=None) -> Flask:
    """
    Build the content service.

    `overrides` is applied on top of the named config class. `translator`
    is an optional object with `translate(text) -> text` used to fill the
    secondary-language column of freshly extracted sections.
    """
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if overrides:
        app.config.update(overrides)
    if not app.config.get("CONTENT_SOURCE_DIRS"):
        app.config["CONTENT_SOURCE_DIRS"] = source_dirs_for(app.config["CONTENT_ROOT"])

    configure_logging(app)
    app.extensions[TRANSLATOR_KEY] = translator

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    app.register_blueprint(v1_bp, url_prefix="/api/v1")
    register_error_handlers(app)
    _register_api_docs(app)

    app.logger.info(f"[CONTENT] app ready ({config_name}, reseed policy {app.config['RESEED_POLICY']})")
    return app


def _register_api_docs(app: Flask) -> None:
    @app.route(OPENAPI_URL, methods=["GET"], endpoint="openapi_content")
    def serve_openapi():
        return send_from_directory(OPENAPI_DIR, OPENAPI_FILE, mimetype="application/yaml")

    swagger_bp = get_swaggerui_blueprint(
        SWAGGER_URL,
        OPENAPI_URL,
        config={
            "app_name": "Site Content API",
            "deepLinking": True,
            "persistAuthorization": True,
        },
    )
    app.register_blueprint(swagger_bp, url_prefix=SWAGGER_URL)
