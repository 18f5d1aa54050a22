import logging

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()


def init_db(app):
    # app.config["SQLALCHEMY_DATABASE_URI"] must already be set
    db.init_app(app)
    migrate.init_app(app, db)
    if app.config.get("AUTO_CREATE_TABLES", True):
        with app.app_context():
            create_tables()


def create_tables() -> None:
    from . import models  # noqa: F401  (register tables on the metadata)

    try:
        db.create_all()
    except SQLAlchemyError:
        logger.exception("Could not create tables")
        return
    logger.info("Database tables ready")


def db_state() -> str:
    """Connectivity of the store: connected or disconnected."""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        db.session.rollback()
        return "disconnected"
    return "connected"
