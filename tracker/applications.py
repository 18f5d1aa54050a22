"""Per-user application records.

Every operation except the admin listing is scoped to the calling user: a
record owned by someone else behaves exactly like one that does not exist.
"""

import logging
from typing import List, Optional

from .db import db
from .errors import NotFoundError
from .models import STATUS_APPLIED, STATUS_REMAINING, Application, User
from .schemas import ApplicationCreate, ApplicationUpdate

logger = logging.getLogger(__name__)


def _newest_first(query):
    return query.order_by(Application.created_at.desc(), Application.id.desc())


def list_applications(user_id: int, status: Optional[str] = None) -> List[Application]:
    query = Application.query.filter_by(user_id=user_id)
    if status:
        query = query.filter_by(status=status)
    return _newest_first(query).all()


def create_application(user_id: int, data: ApplicationCreate) -> Application:
    row = Application(
        user_id=user_id,
        company_name=data.company_name,
        website_url=data.website_url,
        applied_at=data.applied_at,
        image_url=data.image_url,
        status=data.status or STATUS_REMAINING,
        notes=data.notes,
    )
    db.session.add(row)
    db.session.commit()
    logger.info(f"User {user_id} added application {row.id} ({row.company_name})")
    return row


def get_owned(user_id: int, app_id: int) -> Application:
    row = Application.query.filter_by(id=app_id, user_id=user_id).first()
    if row is None:
        raise NotFoundError("Not found")
    return row


def update_application(user_id: int, app_id: int, data: ApplicationUpdate) -> Application:
    row = get_owned(user_id, app_id)
    for field, value in data.changes().items():
        setattr(row, field, value)
    db.session.commit()
    return row


def set_status(user_id: int, app_id: int, status: str) -> Application:
    row = get_owned(user_id, app_id)
    row.status = status
    db.session.commit()
    return row


def mark_applied(user_id: int, app_id: int) -> Application:
    return set_status(user_id, app_id, STATUS_APPLIED)


def mark_remaining(user_id: int, app_id: int) -> Application:
    return set_status(user_id, app_id, STATUS_REMAINING)


def delete_application(user_id: int, app_id: int) -> None:
    row = get_owned(user_id, app_id)
    db.session.delete(row)
    db.session.commit()
    logger.info(f"User {user_id} deleted application {app_id}")


def admin_list_applications(user_id: Optional[int] = None, status: Optional[str] = None) -> List[Application]:
    query = Application.query
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    if status:
        query = query.filter_by(status=status)
    return _newest_first(query).all()


def admin_list_users() -> List[User]:
    return User.query.order_by(User.created_at.desc(), User.id.desc()).all()
