"""
Pytest fixtures: in-memory SQLite, cheap argon2 parameters, a recording
mail dispatcher and a TestClient wired through create_app.
"""
from typing import List, Tuple
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from minifacebook.core.config import Settings
from minifacebook.core.db import Base, make_session_factory
from minifacebook.core.errors import DependencyFailure
from minifacebook.core.security import PasswordHasher, SessionTokens
from minifacebook.main import create_app
from minifacebook.services.accounts import CredentialStore
from minifacebook.services.auth import AuthService

PASSWORD = "S3cret-pass!"


class RecordingDispatcher:
    """Keeps every verification mail instead of sending it."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []
        self.fail = False

    def send_verification(self, to: str, name: str, link: str) -> None:
        if self.fail:
            raise DependencyFailure("smtp down")
        self.sent.append((to, name, link))

    def last_token(self) -> str:
        link = self.sent[-1][2]
        return parse_qs(urlparse(link).query)["token"][0]


class FakeUploader:
    def __init__(self):
        self.uploads = []

    def upload(self, data: bytes, filename: str, content_type=None) -> str:
        self.uploads.append((data, filename, content_type))
        return f"https://blob.example.com/images/{len(self.uploads)}-{filename}"


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret",
        ACCESS_TOKEN_EXPIRE_MINUTES=60,
        PUBLIC_BASE_URL="http://testserver",
        SMTP_HOST="",
        PASSWORD_HASH_TIME_COST=1,
        PASSWORD_HASH_MEMORY_COST=1024,
        PASSWORD_HASH_PARALLELISM=1,
        MAX_IMAGE_BYTES=1024,
        LOG_LEVEL="WARNING",
        _env_file=None,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def store(engine):
    return CredentialStore(make_session_factory(engine))


@pytest.fixture
def auth_service(settings, store, dispatcher):
    return AuthService(
        store=store,
        hasher=PasswordHasher.from_settings(settings),
        sessions=SessionTokens.from_settings(settings),
        dispatcher=dispatcher,
        base_url=settings.PUBLIC_BASE_URL,
    )


@pytest.fixture
def app(settings, engine, dispatcher):
    app = create_app(settings=settings, engine=engine, dispatcher=dispatcher)
    app.state.image_uploader = FakeUploader()
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_user(client, dispatcher):
    """Registers, verifies and logs in; returns (auth headers, account id)."""

    def _make(email: str, name: str = "Tester", password: str = PASSWORD):
        r = client.post("/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        r = client.get("/verify", params={"token": dispatcher.last_token()})
        assert r.status_code == 200, r.text
        r = client.post("/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        headers = {"Authorization": f"Bearer {r.json()['token']}"}
        me = client.get("/api/users/me", headers=headers).json()
        return headers, me["userId"]

    return _make
