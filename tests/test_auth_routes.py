"""
tests/test_auth_routes.py -- Integration tests for /user/* onboarding and login.

Covers:
  - POST /user/new: 201 with a disabled roleId=1 account, 409 on a duplicate
    email in any case, 422 on a short password, 403 when switched off
  - POST /user/authenticate: token usable on protected routes, no-store
    caching, one 401 message for unknown email and wrong password
  - REQUIRE_ENABLED_ACCOUNTS blocks login and token use for disabled accounts
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from core.config import get_settings

# Seeded by the api_client fixture.
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass123"


def _register(client: TestClient, email: str, password: str = "long-enough-pw", **extra):
    body = {"fullName": "New Person", "email": email, "password": password, **extra}
    return client.post("/user/new", json=body)


class TestRegister:
    def test_creates_disabled_account(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = _register(client, "fresh@example.com", gender="Female", experienceYears=2)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["id"] > 0
        assert data["email"] == "fresh@example.com"
        assert data["fullName"] == "New Person"
        assert data["gender"] == "Female"
        assert data["experienceYears"] == 2
        assert data["enabled"] is False
        assert data["roleId"] == 1
        assert "password" not in data
        assert "passwordHash" not in data

        stored = client.app.state.user_store.get_by_id(data["id"])
        assert stored.password_hash
        assert stored.password_hash != "long-enough-pw"

    def test_enabled_in_body_is_ignored(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = _register(client, "sneaky@example.com", enabled=True)
        assert resp.status_code == 201
        assert resp.json()["enabled"] is False

    def test_duplicate_email_any_case(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        assert _register(client, "twice@example.com").status_code == 201
        resp = _register(client, "TWICE@Example.com")
        assert resp.status_code == 409
        data = resp.json()
        assert data["status"] == 409
        assert data["error"] == "Conflict"

    @pytest.mark.parametrize(
        "body",
        [
            {"email": "short@example.com", "password": "short"},
            {"email": "not-an-email", "password": "long-enough-pw"},
            {"password": "long-enough-pw"},
        ],
    )
    def test_invalid_body(self, api_client: tuple[TestClient, str, int], body: dict) -> None:
        client, _token, _uid = api_client
        resp = client.post("/user/new", json=body)
        assert resp.status_code == 422
        assert resp.json()["status"] == 422

    def test_disabled_by_config(self, api_client: tuple[TestClient, str, int], monkeypatch) -> None:
        client, _token, _uid = api_client
        monkeypatch.setattr(get_settings(), "self_registration_enabled", False)
        resp = _register(client, "closed@example.com")
        assert resp.status_code == 403
        assert client.app.state.user_store.get_by_email("closed@example.com") is None


class TestLogin:
    def test_token_works_on_protected_routes(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, uid = api_client
        resp = client.post("/user/authenticate", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200, resp.text
        assert resp.headers["Cache-Control"] == "no-store"
        data = resp.json()
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] == get_settings().token_expire_seconds

        me = client.get("/user/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
        assert me.status_code == 200
        assert me.json()["id"] == uid

        users = client.get("/users", headers={"Authorization": f"Bearer {data['accessToken']}"})
        assert users.status_code == 200

    def test_email_case_does_not_matter(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        resp = client.post("/user/authenticate", json={"email": ADMIN_EMAIL.upper(), "password": ADMIN_PASSWORD})
        assert resp.status_code == 200

    def test_newly_registered_user_can_log_in(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        assert _register(client, "newbie@example.com", password="newbie-password").status_code == 201
        resp = client.post("/user/authenticate", json={"email": "newbie@example.com", "password": "newbie-password"})
        assert resp.status_code == 200

    @pytest.mark.parametrize(
        "email, password",
        [(ADMIN_EMAIL, "wrong-password"), ("ghost@example.com", ADMIN_PASSWORD)],
    )
    def test_bad_credentials_share_one_message(
        self, api_client: tuple[TestClient, str, int], email: str, password: str
    ) -> None:
        client, _token, _uid = api_client
        resp = client.post("/user/authenticate", json={"email": email, "password": password})
        assert resp.status_code == 401
        assert resp.headers["Cache-Control"] == "no-store"
        data = resp.json()
        assert data["status"] == 401
        assert data["error"] == "Unauthorized"
        assert data["message"] == "Invalid email or password."

    def test_missing_fields(self, api_client: tuple[TestClient, str, int]) -> None:
        client, _token, _uid = api_client
        assert client.post("/user/authenticate", json={"email": ADMIN_EMAIL}).status_code == 422


class TestRequireEnabledAccounts:
    def test_disabled_account_cannot_log_in(self, api_client: tuple[TestClient, str, int], monkeypatch) -> None:
        client, _token, _uid = api_client
        assert _register(client, "waiting@example.com", password="waiting-password").status_code == 201
        monkeypatch.setattr(get_settings(), "require_enabled_accounts", True)
        resp = client.post("/user/authenticate", json={"email": "waiting@example.com", "password": "waiting-password"})
        assert resp.status_code == 401

    def test_enabled_account_still_logs_in(self, api_client: tuple[TestClient, str, int], monkeypatch) -> None:
        client, _token, _uid = api_client
        monkeypatch.setattr(get_settings(), "require_enabled_accounts", True)
        resp = client.post("/user/authenticate", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200

    def test_token_of_disabled_account_rejected(self, api_client: tuple[TestClient, str, int], monkeypatch) -> None:
        client, _token, _uid = api_client
        assert _register(client, "later@example.com", password="later-password").status_code == 201
        login = client.post("/user/authenticate", json={"email": "later@example.com", "password": "later-password"})
        token = login.json()["accessToken"]

        monkeypatch.setattr(get_settings(), "require_enabled_accounts", True)
        resp = client.get("/user/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

