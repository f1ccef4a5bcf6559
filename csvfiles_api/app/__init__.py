from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask
from pymongo.errors import DuplicateKeyError
from werkzeug.exceptions import RequestEntityTooLarge

from .config import config
from .db import ensure_indexes
from .routes.files import files_bp
from .routes.users import users_bp
from .utils import error_response


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(overrides: Optional[dict[str, Any]] = None) -> Flask:
    configure_logging()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES
    app.config["ENSURE_INDEXES_ON_STARTUP"] = config.ENSURE_INDEXES_ON_STARTUP
    if overrides:
        app.config.update(overrides)

    app.register_blueprint(files_bp)
    app.register_blueprint(users_bp)

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate_key(exc: DuplicateKeyError):
        return error_response("DUPLICATE", "A file with this filename already exists", 409)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(exc: RequestEntityTooLarge):
        limit = app.config["MAX_CONTENT_LENGTH"]
        return error_response("PAYLOAD_TOO_LARGE", f"Upload exceeds the {limit} byte limit", 413)

    if app.config["ENSURE_INDEXES_ON_STARTUP"]:
        ensure_indexes()
    return app
