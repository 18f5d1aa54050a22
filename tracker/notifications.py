import logging
from datetime import datetime, timedelta
from typing import Optional

import requests
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .db import db
from .errors import InternalError, NotFoundError
from .models import AppOpenLog, User

logger = logging.getLogger(__name__)

THROTTLE_WINDOW = timedelta(hours=24)
APP_OPEN_MESSAGE = "You opened your Placement Tracker. Keep going!"

TWILIO_API = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class SmsClient:
    """Sends SMS through Twilio's REST API; a no-op when not configured."""

    def __init__(self, sid: str = "", token: str = "", sender: str = "", timeout: float = 10):
        self.sid = sid
        self.token = token
        self.sender = sender
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "SmsClient":
        return cls(
            sid=config.get("TWILIO_SID", ""),
            token=config.get("TWILIO_TOKEN", ""),
            sender=config.get("TWILIO_FROM", ""),
            timeout=config.get("SMS_TIMEOUT", 10),
        )

    @property
    def configured(self) -> bool:
        return bool(self.sid and self.token and self.sender)

    def send(self, to: str, body: str) -> bool:
        """Return True when a message was handed to the provider."""
        if not self.configured:
            logger.debug("SMS provider not configured; skipping send")
            return False

        r = requests.post(
            TWILIO_API.format(sid=self.sid),
            auth=(self.sid, self.token),
            data={"From": self.sender, "To": to, "Body": body},
            timeout=self.timeout,
        )
        r.raise_for_status()
        logger.info(f"SMS sent to {to}")
        return True


def sms_client() -> SmsClient:
    return current_app.extensions["sms_client"]


def is_eligible(last_sent_at: Optional[datetime], now: datetime) -> bool:
    return last_sent_at is None or now - last_sent_at > THROTTLE_WINDOW


def record_app_open(user_id: int, now: Optional[datetime] = None) -> bool:
    """Handle an app-open event; return whether an SMS was dispatched.

    The window restarts on every eligible event, even when the provider is
    not configured or the delivery fails.
    """
    now = now or datetime.utcnow()

    try:
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")

        log = AppOpenLog.query.filter_by(user_id=user.id).first()
        if log is None:
            log = AppOpenLog(user_id=user.id, last_sent_at=None)
            db.session.add(log)

        if not is_eligible(log.last_sent_at, now):
            db.session.commit()
            logger.debug(f"App open for user {user_id} inside throttle window")
            return False

        log.last_sent_at = now
        db.session.commit()

        return sms_client().send(user.phone_e164, APP_OPEN_MESSAGE)

    except NotFoundError:
        raise
    except (SQLAlchemyError, requests.RequestException) as e:
        db.session.rollback()
        logger.error(f"App open event failed for user {user_id}: {e}")
        raise InternalError("Event failed") from e
