"""Shared pytest fixtures: throwaway SQLite database, app client, accounts."""

import pytest
from fastapi.testclient import TestClient

from property_api import db
from property_api.main import create_app
from property_api.testing import register_and_login


@pytest.fixture
def database(tmp_path):
    """Point the engine at a fresh SQLite file for each test."""
    db.dispose_engine()
    db.init_engine(f"sqlite:///{tmp_path / 'test.db'}")
    db.init_db()
    yield
    db.dispose_engine()


@pytest.fixture
def client(database):
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def agent_token(client):
    return register_and_login(client, "John Agent", "agent@test.com", "agent")


@pytest.fixture
def other_agent_token(client):
    return register_and_login(client, "Other Agent", "other@test.com", "agent")


@pytest.fixture
def admin_token(client):
    return register_and_login(client, "Jane Admin", "admin@test.com", "admin")
