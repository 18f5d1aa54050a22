# tests/conftest.py
"""
Pytest fixtures: a fresh app per test on a temporary SQLite file, with fast
bcrypt rounds, a temporary upload folder and a recording SMS client.
"""

import pytest
import requests

from tracker import create_app
from tracker.db import db

ADMIN_KEY = "test-admin-key"


class FakeSmsClient:
    """Records messages instead of calling the provider."""

    def __init__(self, configured=True, fail=False):
        self.configured = configured
        self.fail = fail
        self.sent = []

    def send(self, to, body):
        if self.fail:
            raise requests.ConnectionError("provider down")
        if not self.configured:
            return False
        self.sent.append((to, body))
        return True


@pytest.fixture
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
            "BCRYPT_ROUNDS": 4,
            "ADMIN_SIGNUP_KEY": ADMIN_KEY,
            "ADMIN_EMAIL": "",
            "UPLOAD_DIR": str(tmp_path / "uploads"),
            "TWILIO_SID": "",
            "TWILIO_TOKEN": "",
            "TWILIO_FROM": "",
        }
    )
    app.extensions["sms_client"] = FakeSmsClient()
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sms(app):
    return app.extensions["sms_client"]


def signup(client, email="ada@example.com", username="ada", password="s3cret-pass",
           phone="+15550001111"):
    return client.post(
        "/auth/signup",
        json={"email": email, "username": username, "password": password, "phoneE164": phone},
    )


def login(client, email="ada@example.com", password="s3cret-pass", admin=False):
    path = "/auth/admin/login" if admin else "/auth/login"
    return client.post(path, json={"email": email, "password": password})


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(client):
    """Sign up and log in a regular user; returns (user_id, headers)."""

    def _make(email="ada@example.com", username="ada", password="s3cret-pass"):
        res = signup(client, email=email, username=username, password=password)
        assert res.status_code == 200, res.get_json()
        token = login(client, email=email, password=password).get_json()["token"]
        return res.get_json()["userId"], auth_header(token)

    return _make


@pytest.fixture
def make_admin(client):
    def _make(email="root@example.com", username="root", password="admin-pass"):
        res = client.post(
            "/auth/admin/signup",
            json={
                "email": email,
                "username": username,
                "password": password,
                "phoneE164": "+15550009999",
                "adminKey": ADMIN_KEY,
            },
        )
        assert res.status_code == 200, res.get_json()
        token = login(client, email=email, password=password, admin=True).get_json()["token"]
        return res.get_json()["userId"], auth_header(token)

    return _make
