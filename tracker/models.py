from datetime import datetime
from .db import db

ROLE_REGULAR = "regular"
ROLE_ADMIN = "admin"

STATUS_REMAINING = "remaining"
STATUS_APPLIED = "applied"


def _iso(value):
    return value.isoformat() if value is not None else None


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )


class User(TimestampMixin, db.Model):
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.UniqueConstraint("username", name="uq_users_username"),
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    username = db.Column(db.String(255), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_REGULAR)
    phone_e164 = db.Column(db.String(32), nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self) -> dict:
        # password_hash is never exposed
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "phoneE164": self.phone_e164,
            "createdAt": _iso(self.created_at),
        }


class Application(TimestampMixin, db.Model):
    __tablename__ = "applications"

    id = db.Column(db.Integer, primary_key=True)
    # plain reference, deleting a user does not cascade
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    company_name = db.Column(db.String(255), nullable=False)
    website_url = db.Column(db.Text, nullable=False)
    applied_at = db.Column(db.Date, nullable=False)
    image_url = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_REMAINING, index=True)
    notes = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "companyName": self.company_name,
            "websiteUrl": self.website_url,
            "appliedAt": _iso(self.applied_at),
            "imageUrl": self.image_url,
            "status": self.status,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class AppOpenLog(TimestampMixin, db.Model):
    """Last SMS nudge per user; one row per user, created on first app open."""

    __tablename__ = "app_open_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    last_sent_at = db.Column(db.DateTime, nullable=True)
