"""Shared fixtures.

Testing strategy:
1. Database: in-memory SQLite through the application's own engine
2. Supabase: replaced by FakeIdentity via app.dependency_overrides
3. Email: replaced by FakeNotifier, which records what would be sent
4. Bearer auth: real JWT validation with the configured Supabase secret
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

# Settings are read at import time; configure before importing the app.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_KEY"] = "test-anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-length"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["FRONTEND_URL"] = "https://www.fitlyai.com"
for _name in (
    "OPENAI_API_KEY",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "RESEND_API_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
):
    os.environ[_name] = ""

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from fitcoach.database import engine, get_session
from fitcoach.main import app
from fitcoach.models.user import User
from fitcoach.services.identity_service import (
    IdentityError,
    IdentityUser,
    get_identity_provider,
)
from fitcoach.services.notification_service import get_notification_sender

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


class FakeIdentity:
    """In-memory stand-in for the Supabase Auth adapter."""

    def __init__(self):
        self.users: dict[str, IdentityUser] = {}
        self.passwords: dict[str, str] = {}
        self.sessions: dict[str, str] = {}
        self.confirmed: list[str] = []
        self.password_updates: list[tuple[str, str]] = []
        self.fail_confirm = False
        self.fail_update = False

    def add_user(self, email: str, password: str = "secret123", confirmed: bool = False) -> IdentityUser:
        user = IdentityUser(
            id=str(uuid.uuid4()),
            email=email,
            email_confirmed_at="2024-01-01T00:00:00Z" if confirmed else None,
        )
        self.users[user.id] = user
        self.passwords[user.id] = password
        return user

    def issue_session(self, user: IdentityUser) -> str:
        token = uuid.uuid4().hex
        self.sessions[token] = user.id
        return token

    def get_user(self, access_token):
        user_id = self.sessions.get(access_token)
        return self.users.get(user_id) if user_id else None

    def sign_in(self, email, password):
        for user in self.users.values():
            if user.email == email and self.passwords[user.id] == password:
                return user
        return None

    def sign_up(self, email, password):
        if any(u.email == email for u in self.users.values()):
            raise IdentityError("User already registered")
        return self.add_user(email, password)

    def find_user_id_by_email(self, email):
        for user in self.users.values():
            if user.email == email:
                return user.id
        return None

    def confirm_email(self, supabase_id):
        if self.fail_confirm:
            raise RuntimeError("supabase unavailable")
        self.confirmed.append(supabase_id)

    def update_password(self, supabase_id, password):
        if self.fail_update:
            raise RuntimeError("supabase unavailable")
        self.passwords[supabase_id] = password
        self.password_updates.append((supabase_id, password))


class FakeNotifier:
    """Records outgoing emails; set `fail` to simulate provider outages."""

    def __init__(self):
        self.sent: list[tuple[str, str, dict]] = []
        self.fail = False

    def _record(self, kind, to_email, **data):
        if self.fail:
            raise RuntimeError("email provider down")
        self.sent.append((kind, to_email, data))

    def send_verification_email(self, to_email, verification_url):
        self._record("verification", to_email, url=verification_url)

    def send_password_reset_email(self, to_email, reset_url, first_name):
        self._record("password_reset", to_email, url=reset_url, first_name=first_name)

    def send_welcome_email(self, to_email, first_name):
        self._record("welcome", to_email, first_name=first_name)

    def send_subscription_confirmation_email(self, to_email, first_name, plan_name, amount):
        self._record("subscription", to_email, plan_name=plan_name, amount=amount)

    def of_kind(self, kind):
        return [entry for entry in self.sent if entry[0] == kind]

    def last_token(self, kind="verification") -> str:
        """Token query parameter of the most recent link of the given kind."""
        _, _, data = self.of_kind(kind)[-1]
        return parse_qs(urlparse(data["url"]).query)["token"][0]


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(session, identity, notifier):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_notification_sender] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    """Insert a users row directly; defaults to a verified, linked account."""

    def _make_user(email="athlete@example.com", **fields) -> User:
        defaults = {
            "username": email.split("@")[0],
            "email": email,
            "first_name": "Alex",
            "supabase_id": str(uuid.uuid4()),
            "email_verified": True,
        }
        defaults.update(fields)
        user = User(**defaults)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


def make_access_token(sub: str | None, email: str | None = None, expires_in: int = 3600) -> str:
    claims = {
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    if sub is not None:
        claims["sub"] = sub
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers():
    """Bearer headers for a users row (or explicit sub/email)."""

    def _auth_headers(user: User | None = None, *, sub=None, email=None, expires_in=3600):
        if user is not None:
            sub = sub or user.supabase_id
            email = email or user.email
        return {"Authorization": f"Bearer {make_access_token(sub, email, expires_in)}"}

    return _auth_headers
