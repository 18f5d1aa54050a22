import hashlib
import hmac
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import current_app, g, request
from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer
from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from .db import db
from .errors import AuthError, ConflictError, ForbiddenError, ValidationError, conflict_field
from .models import ROLE_ADMIN, ROLE_REGULAR, User

logger = logging.getLogger(__name__)

TOKEN_SALT = "tracker-auth-token"


@dataclass(frozen=True)
class Identity:
    """Who is calling, as decoded from a verified bearer token."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _hasher():
    return bcrypt.using(rounds=current_app.config.get("BCRYPT_ROUNDS", 10))


def hash_password(password: str) -> str:
    # bcrypt has a 72 byte password limit; enforce it clearly
    if len(password.encode("utf-8")) > 72:
        raise ValidationError("Password too long. Please keep it under 72 characters.")
    return _hasher().hash(password)


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # over-long input or a corrupt stored hash
        return False


def register_user(email: str, username: str, password: str, phone: str, role: str = ROLE_REGULAR) -> User:
    email = normalize_email(email)

    if User.query.filter_by(email=email).first():
        raise ConflictError("email")
    if User.query.filter_by(username=username).first():
        raise ConflictError("username")

    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
        role=role,
        phone_e164=phone,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as e:
        # a concurrent signup won the race for the same email/username
        db.session.rollback()
        raise ConflictError(conflict_field(e)) from e

    logger.info(f"Registered {role} user {user.id} ({username})")
    return user


def check_admin_key(supplied: Optional[str]) -> None:
    expected = current_app.config.get("ADMIN_SIGNUP_KEY") or ""
    if not expected or not supplied or not isinstance(supplied, str):
        raise AuthError("Invalid admin key")
    if not hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Admin signup attempted with a wrong admin key")
        raise AuthError("Invalid admin key")


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(
        current_app.config["SECRET_KEY"],
        salt=TOKEN_SALT,
        signer_kwargs={"digest_method": hashlib.sha256},
    )


def issue_token(user: User) -> str:
    return _serializer().dumps({"userId": user.id, "role": user.role})


def verify_token(token: Optional[str]) -> Identity:
    if not token:
        raise AuthError("No token")

    max_age = current_app.config.get("TOKEN_MAX_AGE", 7 * 24 * 60 * 60)
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        raise AuthError("Token expired")
    except BadData:
        raise AuthError("Invalid token")

    try:
        return Identity(user_id=int(payload["userId"]), role=str(payload["role"]))
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid token")


def authenticate(email: str, password: str, required_role: Optional[str] = None) -> str:
    """Check credentials and return a fresh bearer token."""
    query = User.query.filter_by(email=normalize_email(email))
    if required_role:
        query = query.filter_by(role=required_role)
    user = query.first()

    if not user or not check_password(password, user.password_hash):
        logger.warning(f"Failed login for {normalize_email(email)!r}")
        raise AuthError("Invalid credentials")

    return issue_token(user)


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip() or None
    return header.strip() or None


def current_identity() -> Identity:
    return g.identity


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        g.identity = verify_token(bearer_token())
        return view(*args, **kwargs)
    return wrapped


def admin_required(view):
    @login_required
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_identity().is_admin:
            raise ForbiddenError("Forbidden")
        return view(*args, **kwargs)
    return wrapped


def ensure_admin_seed():
    """
    Creates/ensures an admin user from config:
      ADMIN_EMAIL, ADMIN_USERNAME, ADMIN_PASSWORD, ADMIN_PHONE

    Safe when tables aren't created yet.
    """
    config = current_app.config
    admin_email = normalize_email(config.get("ADMIN_EMAIL") or "")
    admin_username = (config.get("ADMIN_USERNAME") or "").strip()
    admin_password = (config.get("ADMIN_PASSWORD") or "").strip()
    admin_phone = (config.get("ADMIN_PHONE") or "").strip()

    if not (admin_email and admin_username and admin_password and admin_phone):
        return None

    try:
        user = User.query.filter_by(email=admin_email).first()
        if user:
            if user.role != ROLE_ADMIN:
                user.role = ROLE_ADMIN
                db.session.commit()
                logger.info(f"Promoted {admin_email} to admin")
            return user

        return register_user(admin_email, admin_username, admin_password, admin_phone, role=ROLE_ADMIN)

    except (OperationalError, ProgrammingError):
        # users table doesn't exist yet (migrations not applied)
        db.session.rollback()
        logger.warning("Skipping admin seed: users table missing")
        return None
    except (ValidationError, ConflictError) as e:
        # don't crash startup over a bad seed
        logger.warning(f"Skipping admin seed: {e.message}")
        return None
