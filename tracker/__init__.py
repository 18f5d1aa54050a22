"""Placement Tracker: a small job-application tracking API."""

import logging

from flask import Flask

from .auth import ensure_admin_seed
from .config import Config
from .db import create_tables, init_db
from .errors import register_error_handlers
from .logs import setup_logging
from .notifications import SmsClient

logger = logging.getLogger(__name__)


def create_app(overrides: dict = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    setup_logging(app.config["LOG_LEVEL"])

    # store connection: bound once here, reported by /db-health
    init_db(app)
    app.extensions["sms_client"] = SmsClient.from_config(app.config)

    register_error_handlers(app)

    from .routes import bp
    app.register_blueprint(bp)

    register_commands(app)

    with app.app_context():
        ensure_admin_seed()

    logger.info("Placement Tracker API initialised")
    return app


def register_commands(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db_command():
        """Create any missing tables."""
        create_tables()
        print("Database tables ready.")

    @app.cli.command("seed-admin")
    def seed_admin_command():
        """Create or promote the admin from ADMIN_* settings."""
        user = ensure_admin_seed()
        print(f"Admin ready: {user.email}" if user else "Admin seed skipped (ADMIN_* not set).")
