"""Error taxonomy and the single place where errors become HTTP responses."""

import logging
import re
from typing import Optional

from flask import jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Missing fields"


class AuthError(ApiError):
    status_code = 401
    default_message = "Invalid credentials"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field[:1].upper()}{field[1:]} already in use")


class InternalError(ApiError):
    status_code = 500


# sqlite: "UNIQUE constraint failed: users.email"
# postgres: 'Key (email)=(a@b.c) already exists.'
# mysql: "Duplicate entry 'a@b.c' for key 'uq_users_email'"
_UNIQUE_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: \w+\.(\w+)"),
    re.compile(r"Key \((\w+)\)="),
    re.compile(r"uq_\w+?_(\w+)['\"]?"),
)


def conflict_field(exc: IntegrityError) -> str:
    """Name the column behind a unique-constraint violation."""
    detail = str(getattr(exc, "orig", exc))
    for pattern in _UNIQUE_PATTERNS:
        m = pattern.search(detail)
        if m:
            return m.group(1)
    return "field"


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status_code >= 500:
            logger.error(f"{e.__class__.__name__}: {e.message}")
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception(f"Unhandled error: {e}")
        return jsonify({"error": "Internal server error"}), 500
