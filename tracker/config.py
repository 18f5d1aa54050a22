import os

from dotenv import load_dotenv

load_dotenv()


def _database_url() -> str:
    db_url = os.getenv("DATABASE_URL") or "sqlite:///local.db"
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    return db_url


class Config:
    """Settings read from the environment (and .env) at import time."""

    SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "1") != "0"

    # bearer tokens: 7 days
    TOKEN_MAX_AGE = int(os.getenv("TOKEN_MAX_AGE", str(7 * 24 * 60 * 60)))
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

    ADMIN_SIGNUP_KEY = os.getenv("ADMIN_SIGNUP_KEY", "")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "")
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
    ADMIN_PHONE = os.getenv("ADMIN_PHONE", "")

    TWILIO_SID = os.getenv("TWILIO_SID", "")
    TWILIO_TOKEN = os.getenv("TWILIO_TOKEN", "")
    TWILIO_FROM = os.getenv("TWILIO_FROM", "")
    SMS_TIMEOUT = float(os.getenv("SMS_TIMEOUT", "10"))

    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(5 * 1024 * 1024)))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PORT = int(os.getenv("PORT", "4000"))
