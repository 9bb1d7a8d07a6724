"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import re
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from services.session import issue_session  # noqa: E402
from utils.clock import utcnow  # noqa: E402

TOKEN_PATTERN = re.compile(r"token=([0-9a-f-]{36})")


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    RATE_LIMIT = "1000 per minute"
    APP_URL = "https://farmai.test"
    RESEND_API_KEY = None
    OPENAI_API_KEY = None
    STRIPE_SECRET_KEY = "sk_test"
    STRIPE_WEBHOOK_SECRET = "whsec_test"
    BILLING_SUCCESS_URL = "https://example.com/success"
    BILLING_CANCEL_URL = "https://example.com/cancel"


class FakeMailer:
    """Records outgoing mail instead of calling the mail API."""

    def __init__(self):
        self.sent: list[dict] = []

    def send(self, to: str, subject: str, html: str) -> None:
        self.sent.append({"to": to, "subject": subject, "html": html})

    def last_token(self) -> str:
        match = TOKEN_PATTERN.search(self.sent[-1]["html"])
        assert match, "no token link in the last email"
        return match.group(1)


class FakeTextGenerator:
    """Stands in for the OpenAI client."""

    def __init__(self):
        self.calls: list[dict] = []
        self.reply = "Plant maize early in the rainy season."
        self.error: Exception | None = None

    def generate(self, system_prompt: str, prompt: str) -> str:
        self.calls.append({"system_prompt": system_prompt, "prompt": prompt})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    upload_dir = tmp_path / "uploads"

    class TestConfig(_BaseTestConfig):
        UPLOAD_DIR = str(upload_dir)

    application = create_app(TestConfig)
    application.extensions["mailer"] = FakeMailer()
    application.extensions["text_generator"] = FakeTextGenerator()

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def outbox(app: Flask) -> FakeMailer:
    return app.extensions["mailer"]


@pytest.fixture()
def generator(app: Flask) -> FakeTextGenerator:
    return app.extensions["text_generator"]


@pytest.fixture()
def make_user(app: Flask):
    """Return a factory that persists a user and returns its id."""

    def _make(
        email: str = "farmer@example.com",
        password: str = "Password123",
        *,
        name: str = "Ada Farmer",
        role: str = "USER",
        verified: bool = True,
        wallet_balance: int | str = 0,
    ) -> str:
        with app.app_context():
            user = User(
                name=name,
                email=email,
                role=role,
                wallet_balance=Decimal(str(wallet_balance)),
                email_verified=utcnow() if verified else None,
            )
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture()
def auth_headers(app: Flask):
    """Return a factory building bearer headers for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        with app.app_context():
            token = issue_session(db.session.get(User, user_id))
        return {"Authorization": f"Bearer {token}"}

    return _headers
