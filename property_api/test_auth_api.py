"""
Tests for /api/auth/register and /api/auth/login.

Run: pytest property_api/test_auth_api.py -v
"""

from datetime import datetime, timezone

import jwt

from property_api.config import ALGORITHM, SECRET_KEY
from property_api.testing import DEFAULT_PASSWORD


def _register(client, **overrides):
    payload = {
        "name": "John Agent",
        "email": "agent@test.com",
        "password": DEFAULT_PASSWORD,
        "role": "agent",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


class TestRegister:

    def test_register_agent(self, client):
        resp = _register(client)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["message"] == "User registered successfully"
        assert body["user"]["role"] == "agent"
        assert body["user"]["email"] == "agent@test.com"
        assert body["user"]["id"]

    def test_register_admin(self, client):
        resp = _register(client, name="Jane Admin", email="admin@test.com", role="admin")
        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "admin"

    def test_serialized_user_never_contains_password(self, client):
        resp = _register(client)
        user = resp.json()["user"]
        assert "password" not in user
        assert "password_hash" not in user
        assert DEFAULT_PASSWORD not in resp.text

    def test_duplicate_email_rejected(self, client):
        assert _register(client).status_code == 201

        resp = _register(client, name="Someone Else")
        assert resp.status_code == 400
        assert resp.json() == {"error": "Email already registered", "status": 400}

    def test_unknown_role_rejected(self, client):
        resp = _register(client, role="owner")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Role must be agent or admin"

    def test_missing_fields_rejected(self, client):
        resp = client.post("/api/auth/register", json={"email": "a@x.com", "password": "pw123456"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == 400
        assert "name" in body["error"]
        assert "role" in body["error"]

    def test_blank_name_rejected(self, client):
        resp = _register(client, name="   ")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Name, email, password, and role are required"

    def test_unknown_fields_rejected(self, client):
        resp = _register(client, is_admin=True)
        assert resp.status_code == 400

    def test_missing_body_rejected(self, client):
        resp = client.post("/api/auth/register")
        assert resp.status_code == 400
        assert resp.json()["status"] == 400


class TestLogin:

    def test_login_returns_token_with_claims(self, client):
        created = _register(client).json()["user"]

        resp = client.post("/api/auth/login", json={"email": "agent@test.com", "password": DEFAULT_PASSWORD})
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["message"] == "Login successful"
        assert body["user"]["id"] == created["id"]
        assert "password_hash" not in body["user"]

        claims = jwt.decode(body["token"], SECRET_KEY, algorithms=[ALGORITHM])
        assert claims["sub"] == created["id"]
        assert claims["email"] == "agent@test.com"
        assert claims["role"] == "agent"

        lifetime = claims["exp"] - claims["iat"]
        assert lifetime == 24 * 60 * 60
        assert claims["exp"] > datetime.now(timezone.utc).timestamp()

    def test_wrong_password_and_unknown_email_look_identical(self, client):
        _register(client)

        wrong_password = client.post("/api/auth/login", json={"email": "agent@test.com", "password": "wrongpassword"})
        unknown_email = client.post("/api/auth/login", json={"email": "nobody@test.com", "password": DEFAULT_PASSWORD})

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.json()["error"] == "Invalid email or password"

    def test_email_is_case_sensitive(self, client):
        _register(client)
        resp = client.post("/api/auth/login", json={"email": "Agent@Test.com", "password": DEFAULT_PASSWORD})
        assert resp.status_code == 401

    def test_missing_password_rejected(self, client):
        resp = client.post("/api/auth/login", json={"email": "agent@test.com"})
        assert resp.status_code == 400

    def test_empty_password_rejected(self, client):
        resp = client.post("/api/auth/login", json={"email": "agent@test.com", "password": ""})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Email and password are required"
