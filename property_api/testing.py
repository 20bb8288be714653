"""Helpers shared by the test modules."""

from typing import Any, Dict

from fastapi.testclient import TestClient

DEFAULT_PASSWORD = "password123"


def register_and_login(client: TestClient, name: str, email: str, role: str, password: str = DEFAULT_PASSWORD) -> str:
    """Register an account through the API and return its bearer token."""
    resp = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "role": role},
    )
    assert resp.status_code == 201, f"Register failed: {resp.text}"

    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    return resp.json()["token"]


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def create_property(client: TestClient, token: str, **fields: Any) -> Dict[str, Any]:
    """Create a listing as ``token`` and return the serialized property."""
    payload = {"title": "Beachfront House", "price": 500000, "location": "Miami"}
    payload.update(fields)
    resp = client.post("/api/properties", json=payload, headers=bearer(token))
    assert resp.status_code == 201, f"Create failed: {resp.text}"
    return resp.json()["property"]
