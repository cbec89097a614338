import logging
import logging.config
import os

from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

from .config import Config

db = SQLAlchemy()

logger = logging.getLogger(__name__)


def _configure_logging(level: str):
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "[%(asctime)s] %(levelname)s in %(name)s: %(message)s"},
        },
        "handlers": {
            "wsgi": {
                "class": "logging.StreamHandler",
                "stream": "ext://flask.logging.wsgi_errors_stream",
                "formatter": "default",
            },
        },
        "root": {"level": level, "handlers": ["wsgi"]},
    })


def create_app(overrides=None):
    config = Config.from_env(overrides)
    _configure_logging(config.LOG_LEVEL)

    app = Flask(__name__)
    app.config.from_object(config)

    db.init_app(app)

    CORS(
        app,
        origins=config.ALLOWED_ORIGINS,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        supports_credentials=True,
    )

    # ---------- MODELS & ROUTES ----------
    from . import models  # noqa: F401
    from .errors import register_error_handlers
    from .routes import register_blueprints
    from .seed import register_commands, seed_data

    register_error_handlers(app)
    register_blueprints(app)
    register_commands(app)

    # ---------- UPLOADS ----------
    @app.get("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(os.path.abspath(app.config["UPLOAD_FOLDER"]), filename)

    # ---------- HEALTH ----------
    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ---------- BOOTSTRAP DB ----------
    if app.config["AUTO_MIGRATE"]:
        with app.app_context():
            db.create_all()
            logger.info("Database schema ready")
            seed_data()

    return app
