"""
Factory for the store admin dashboard API.

Serves the till, orders, marketing, store profile and registrations screens
as JSON endpoints under /api/stores/<store_id>/.
"""

from __future__ import annotations

import logging
import os

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from balcao.config import load_config, validate_required_env_vars
from balcao.db import init_db, init_engine
from balcao.error_handlers import register_error_handlers
from balcao.logging_config import configure_logging
from balcao.models import Base

logger = logging.getLogger(__name__)

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8080",
]


def create_app() -> Flask:
    """
    Build the Flask application that powers the store dashboard.
    """
    # Validate all required environment variables (fail-fast)
    validate_required_env_vars(skip_in_debug=True)

    config = load_config("balcao-dashboard")

    configure_logging(config.app_name, config.log_level)

    # Initialize database engine first (before any DB queries)
    init_engine(config)
    init_db(Base.metadata)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["APP_NAME"] = config.app_name
    app.config["DEBUG_MODE"] = config.debug_mode
    app.config["DEBUG"] = config.flask_debug
    app.config["REPORT_TIMEZONE"] = config.report_timezone
    app.config["CURRENCY_SYMBOL"] = config.currency_symbol
    app.config["PUBLIC_BASE_URL"] = config.public_base_url
    app.config["STORAGE_BUCKET_BANNERS"] = config.storage_bucket_banners
    app.config["STORAGE_BUCKET_LOGOS"] = config.storage_bucket_logos
    app.config["BALCAO_CONFIG"] = config

    register_error_handlers(app)

    # ProxyFix: Trust X-Forwarded-* headers from reverse proxy
    num_proxies = int(os.getenv("NUM_PROXIES", "0"))
    if num_proxies > 0:
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=num_proxies,
            x_proto=num_proxies,
            x_host=num_proxies,
            x_port=num_proxies,
        )

    from dashboard_app.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Configure CORS with secure defaults
    allowed_origins = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]
    if config.debug_mode or not allowed_origins:
        allowed_origins = DEV_ORIGINS
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins, "supports_credentials": True}},
        supports_credentials=True,
    )

    logger.info("Dashboard API ready (%s)", config.app_name)
    return app
