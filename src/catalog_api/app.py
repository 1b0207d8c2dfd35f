"""
Factory for the catalog and booking REST API.

All resources are served under /api/v1; /health answers liveness checks.
"""

from __future__ import annotations

import atexit
import time

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from catalog_api.error_handlers import register_error_handlers
from catalog_api.extensions import EXTENSION_KEY, CatalogServices
from catalog_api.routes.api import api_bp
from catalog_shared.config import AppConfig, load_config
from catalog_shared.db import Database
from catalog_shared.logging_config import configure_logging, get_logger
from catalog_shared.models import Base

logger = get_logger(__name__)


def create_app(config: AppConfig | None = None) -> Flask:
    app = Flask(__name__)
    config = config or load_config("catalog-api")

    configure_logging(config.get_string("app_name"), config.get_string("log_level", "INFO"))

    # Database
    db = Database.from_config(config)
    db.connect()
    db.create_schema(Base.metadata)
    atexit.register(db.close)

    app.config["APP_NAME"] = config.get_string("app_name")
    app.config["DEBUG_MODE"] = config.get_bool("debug_mode")
    app.json.sort_keys = False
    app.extensions[EXTENSION_KEY] = CatalogServices.build(config, db)

    app.register_blueprint(api_bp, url_prefix="/api/v1")

    # Error Handlers
    register_error_handlers(app)

    # CORS
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    _register_request_logging(app)

    @app.route("/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "service": app.config["APP_NAME"],
                "database": "connected" if db.is_connected else "disconnected",
            }
        ), 200

    return app


def _register_request_logging(app: Flask) -> None:
    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.pop("request_started", None)
        duration_ms = (time.perf_counter() - started) * 1000 if started else None
        logger.info(
            "Request handled",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2) if duration_ms is not None else None,
            },
        )
        return response
