"""
Pytest configuration and fixtures.

Every test gets its own SQLite file under ``tmp_path`` and an app whose
outbound HTTP (chat completions, Supabase Auth) goes to in-process fakes
through ``httpx.MockTransport`` – no test touches the network.
"""

import json
import os
import tempfile
from pathlib import Path

# Keep test runs from writing into the project's log/ directory
os.environ.setdefault("HIINEN_LOG_DIR", str(Path(tempfile.gettempdir()) / "hiinen-test-logs"))

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import models.audit_log  # noqa: F401, E402
import models.user  # noqa: F401, E402
from core.config import Settings  # noqa: E402
from database import Base  # noqa: E402
from main import create_app  # noqa: E402
from users.store import IdentityStore  # noqa: E402

TEST_ROUNDS = 1000
TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
PASSWORD = "s3cret-pass"


class FakeModel:
    """Stands in for the chat-completions endpoint."""

    def __init__(self):
        self.requests: list[dict] = []
        self.urls: list[str] = []
        self.headers: list[httpx.Headers] = []
        self.replies: list[str] = []
        self.status_code = 200
        self.error: Exception | None = None

    def reply_with(self, *contents):
        self.replies.extend(contents)

    def reply_json(self, data):
        self.replies.append(json.dumps(data))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        self.headers.append(request.headers)
        self.requests.append(json.loads(request.content))
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(
                self.status_code,
                json={"error": {"code": "unauthorized", "message": "Bad credentials: token ghp_secret123"}},
            )
        content = self.replies.pop(0) if self.replies else "Hello from your co-founder"
        return httpx.Response(
            200,
            json={
                "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
                "usage": {"prompt_tokens": 11, "completion_tokens": 7, "total_tokens": 18},
            },
        )


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite:///{tmp_path / 'test.db'}",
        "secret_key": TEST_SECRET,
        "password_hash_rounds": TEST_ROUNDS,
        "ai_endpoint": "https://models.test/inference",
        "ai_model": "test/model",
        "ai_token": "test-ai-token",
        "ai_timeout_seconds": 5.0,
        "frontend_url": "https://app.test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def app(settings, fake_model):
    application = create_app(settings, ai_transport=httpx.MockTransport(fake_model))
    Base.metadata.create_all(application.state.engine)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def store(app):
    db = app.state.session_factory()
    yield IdentityStore(db, hash_rounds=TEST_ROUNDS)
    db.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def signup(client, email="ada@example.com", password=PASSWORD, full_name="Ada Lovelace", user_type="entrepreneur"):
    return client.post(
        "/auth/signup",
        json={"email": email, "password": password, "fullName": full_name, "userType": user_type},
    )


def login(client, email="ada@example.com", password=PASSWORD):
    return client.post("/auth/login", json={"email": email, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_token(client):
    assert signup(client).status_code == 201
    return login(client).json()["token"]


@pytest.fixture
def admin_token(client, store):
    store.create_user(name="Root Admin", email="root@example.com", password=PASSWORD, role="admin")
    return login(client, email="root@example.com").json()["token"]
