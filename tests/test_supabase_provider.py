"""
Tests for AUTH_PROVIDER=supabase against an in-process fake of the GoTrue API
"""
import itertools
import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient

from database import Base
from main import create_app
from users.store import IdentityStore

from conftest import PASSWORD, TEST_ROUNDS, bearer, login, make_settings, signup


class FakeGoTrue:
    """Just enough of ``/auth/v1`` for signup, password login, refresh, user lookup and logout."""

    def __init__(self):
        self.users: dict[str, dict] = {}  # email -> user
        self.passwords: dict[str, str] = {}
        self.access: dict[str, str] = {}  # token -> email
        self.refresh: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.api_keys: list[str | None] = []
        self.down = False
        self._ids = itertools.count(1)

    def add_user(self, email, password=PASSWORD, metadata=None, confirmed=True):
        user = {
            "id": f"sb-{next(self._ids):04d}",
            "email": email,
            "email_confirmed_at": "2026-01-01T00:00:00Z" if confirmed else None,
            "user_metadata": metadata or {},
        }
        self.users[email] = user
        self.passwords[email] = password
        return user

    def session_for(self, email):
        n = next(self._ids)
        access, refresh = f"at-{n}", f"rt-{n}"
        self.access[access] = email
        self.refresh[refresh] = email
        return {
            "access_token": access,
            "refresh_token": refresh,
            "expires_in": 3600,
            "token_type": "bearer",
            "user": self.users[email],
        }

    def _bearer(self, request):
        header = request.headers.get("authorization", "")
        return header[len("Bearer "):] if header.startswith("Bearer ") else None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        self.api_keys.append(request.headers.get("apikey"))
        if self.down:
            raise httpx.ConnectError("connection refused by sb.internal:9999")

        body = json.loads(request.content) if request.content else {}

        if path == "/auth/v1/signup":
            if body["email"] in self.users:
                return httpx.Response(422, json={"code": 422, "msg": "User already registered"})
            # e-mail confirmation on: bare user object, no session
            return httpx.Response(200, json=self.add_user(body["email"], body["password"], body.get("data"), confirmed=False))

        if path == "/auth/v1/token":
            grant = request.url.params.get("grant_type")
            if grant == "password":
                email = body["email"]
                if self.passwords.get(email) != body["password"]:
                    return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})
                return httpx.Response(200, json=self.session_for(email))
            if grant == "refresh_token":
                email = self.refresh.pop(body["refresh_token"], None)
                if email is None:
                    return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid Refresh Token"})
                return httpx.Response(200, json=self.session_for(email))

        if path == "/auth/v1/user":
            email = self.access.get(self._bearer(request))
            if email is None:
                return httpx.Response(401, json={"code": 401, "msg": "invalid JWT: unable to parse or verify signature"})
            return httpx.Response(200, json=self.users[email])

        if path == "/auth/v1/logout":
            self.access.pop(self._bearer(request), None)
            return httpx.Response(204)

        return httpx.Response(404, json={"msg": "not found"})


@pytest.fixture
def gotrue():
    return FakeGoTrue()


@pytest.fixture
def sb_app(tmp_path, fake_model, gotrue):
    settings = make_settings(
        tmp_path,
        auth_provider="supabase",
        supabase_url="https://sb.test",
        supabase_anon_key="anon-key",
    )
    application = create_app(
        settings,
        ai_transport=httpx.MockTransport(fake_model),
        auth_transport=httpx.MockTransport(gotrue),
    )
    Base.metadata.create_all(application.state.engine)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def sb_client(sb_app):
    with TestClient(sb_app) as c:
        yield c


@pytest.fixture
def sb_store(sb_app):
    db = sb_app.state.session_factory()
    yield IdentityStore(db, hash_rounds=TEST_ROUNDS)
    db.close()


def _fresh_user(sb_app, email):
    with sb_app.state.session_factory() as db:
        return IdentityStore(db, hash_rounds=TEST_ROUNDS).find_by_email(email)


def test_signup_links_profile_without_local_password(sb_client, sb_app, gotrue):
    resp = signup(sb_client, user_type="mentor")

    assert resp.status_code == 201
    assert resp.json()["user"]["userType"] == "mentor"
    assert resp.json()["user"]["emailVerified"] is False

    user = _fresh_user(sb_app, "ada@example.com")
    assert user.supabase_id == gotrue.users["ada@example.com"]["id"]
    assert user.password_hash is None
    assert gotrue.users["ada@example.com"]["user_metadata"] == {"full_name": "Ada Lovelace", "user_type": "mentor"}
    assert set(gotrue.api_keys) == {"anon-key"}


def test_signup_validates_before_calling_provider(sb_client, gotrue):
    resp = signup(sb_client, email="not-an-email", password="123")

    assert resp.status_code == 400
    assert gotrue.calls == []


def test_signup_duplicate_is_rejected_locally(sb_client, gotrue):
    assert signup(sb_client).status_code == 201
    gotrue.calls.clear()

    resp = signup(sb_client)

    assert resp.status_code == 400
    assert resp.json()["error"] == "User with this email already exists"
    assert gotrue.calls == []


def test_provider_rejection_message_is_passed_through(sb_client, gotrue):
    gotrue.add_user("ada@example.com")

    resp = signup(sb_client)

    assert resp.status_code == 400
    assert resp.json()["error"] == "User already registered"


def test_login_and_me(sb_client, sb_app):
    signup(sb_client)

    resp = login(sb_client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["token"].startswith("at-")
    assert body["refreshToken"].startswith("rt-")
    assert body["expiresIn"] == 3600

    me = sb_client.get("/auth/me", headers=bearer(body["token"]))
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "ada@example.com"
    assert _fresh_user(sb_app, "ada@example.com").last_login is not None


def test_login_wrong_password(sb_client):
    signup(sb_client)

    resp = login(sb_client, password="wrong-password")

    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid credentials"


def test_invalid_token(sb_client):
    resp = sb_client.get("/auth/me", headers=bearer("forged"))

    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid token"


def test_unknown_identity_is_provisioned_from_metadata(sb_client, sb_app, gotrue):
    gotrue.add_user("grace@example.com", metadata={"full_name": "Grace Hopper", "user_type": "mentor"})
    token = gotrue.session_for("grace@example.com")["access_token"]

    resp = sb_client.get("/auth/me", headers=bearer(token))

    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["fullName"] == "Grace Hopper"
    assert user["userType"] == "mentor"
    assert user["emailVerified"] is True
    assert _fresh_user(sb_app, "grace@example.com").supabase_id == gotrue.users["grace@example.com"]["id"]


def test_provisioning_never_grants_admin(sb_client, gotrue):
    gotrue.add_user("mallory@example.com", metadata={"name": "Mallory", "user_type": "admin"})
    token = gotrue.session_for("mallory@example.com")["access_token"]

    resp = sb_client.get("/auth/me", headers=bearer(token))

    assert resp.json()["user"]["userType"] == "entrepreneur"
    assert resp.json()["user"]["fullName"] == "Mallory"


def test_existing_profile_is_linked_by_email(sb_client, sb_app, sb_store, gotrue):
    local = sb_store.create_user(name="Ada Lovelace", email="ada@example.com", password=PASSWORD)
    remote = gotrue.add_user("ada@example.com")
    token = gotrue.session_for("ada@example.com")["access_token"]

    resp = sb_client.get("/auth/me", headers=bearer(token))

    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == local.id
    assert _fresh_user(sb_app, "ada@example.com").supabase_id == remote["id"]


def test_unconfirmed_email_never_links_existing_profile(sb_client, sb_app, sb_store, gotrue):
    sb_store.create_user(name="Victim", email="victim@example.com", password=PASSWORD)
    gotrue.add_user("victim@example.com", password="attacker-pass", confirmed=False)
    token = gotrue.session_for("victim@example.com")["access_token"]

    resp = sb_client.get("/auth/me", headers=bearer(token))

    assert resp.status_code == 401
    assert resp.json()["error"] == "Email address is not verified"
    assert _fresh_user(sb_app, "victim@example.com").supabase_id is None

    # Password login through the provider is refused the same way
    assert login(sb_client, email="victim@example.com", password="attacker-pass").status_code == 401


def test_identity_without_email_is_rejected(sb_client, sb_app, gotrue):
    gotrue.add_user("", metadata={"full_name": "Phone User"})
    token = gotrue.session_for("")["access_token"]

    resp = sb_client.get("/auth/me", headers=bearer(token))

    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid token"
    with sb_app.state.session_factory() as db:
        assert IdentityStore(db, hash_rounds=TEST_ROUNDS).list_users() == []


def test_disabled_profile_is_rejected(sb_client, sb_store, gotrue):
    signup(sb_client)
    user = sb_store.find_by_email("ada@example.com")
    sb_store.set_active(user, False)

    assert login(sb_client).status_code == 401
    token = gotrue.session_for("ada@example.com")["access_token"]
    assert sb_client.get("/auth/me", headers=bearer(token)).status_code == 401


def test_logout_revokes_session(sb_client, gotrue):
    signup(sb_client)
    token = login(sb_client).json()["token"]

    resp = sb_client.post("/auth/logout", headers=bearer(token))

    assert resp.status_code == 200
    assert ("POST", "/auth/v1/logout") in gotrue.calls
    assert sb_client.get("/auth/me", headers=bearer(token)).status_code == 401


def test_refresh(sb_client):
    signup(sb_client)
    refresh_token = login(sb_client).json()["refreshToken"]

    resp = sb_client.post("/auth/refresh", json={"refreshToken": refresh_token})
    assert resp.status_code == 200
    assert sb_client.get("/auth/me", headers=bearer(resp.json()["token"])).status_code == 200

    # GoTrue refresh tokens are single use
    again = sb_client.post("/auth/refresh", json={"refreshToken": refresh_token})
    assert again.status_code == 401


@pytest.mark.parametrize("name,expected", [("google", "google"), ("linkedin", "linkedin_oidc")])
def test_oauth_url(sb_client, name, expected):
    resp = sb_client.post(f"/auth/oauth/{name}")

    assert resp.status_code == 200
    url = urlparse(resp.json()["authUrl"])
    assert f"{url.scheme}://{url.netloc}{url.path}" == "https://sb.test/auth/v1/authorize"
    query = parse_qs(url.query)
    assert query["provider"] == [expected]
    assert query["redirect_to"] == ["https://app.test/dashboard"]


def test_password_change_is_refused_for_external_accounts(sb_client):
    signup(sb_client)
    token = login(sb_client).json()["token"]

    resp = sb_client.put(
        "/users/me/profile",
        json={"password": "another-pass", "currentPassword": PASSWORD},
        headers=bearer(token),
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Password is managed by the external identity provider"


def test_provider_outage_is_sanitised(sb_client, gotrue):
    gotrue.down = True

    resp = login(sb_client)

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Authentication service unavailable"}
    assert "sb.internal" not in resp.text
