"""Shared fixtures: an isolated application per test backed by a temp sqlite file."""

import pytest
from fastapi.testclient import TestClient

from matchmaker.core.app_factory import create_application


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "matchmaker.db"))
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("EXPOSE_DEBUG_CODES", "true")
    monkeypatch.setenv("TRUST_USER_ID_HEADER", "true")
    monkeypatch.setenv("ENCRYPTION_SECRET", "test-encryption-secret")
    monkeypatch.setenv("SESSION_SECRET", "test-session-secret")
    monkeypatch.setenv("SMTP_HOST", "")
    monkeypatch.setenv("SMTP_FROM_EMAIL", "")
    return monkeypatch


@pytest.fixture
def client(app_env):
    with TestClient(create_application()) as test_client:
        yield test_client


@pytest.fixture
def container(client):
    return client.app.state.container


@pytest.fixture
def signup(client):
    def _signup(name, email, password="password123", **profile):
        response = client.post(
            "/api/signup",
            json={"name": name, "email": email, "password": password, **profile},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _signup


@pytest.fixture
def make_user(client, signup):
    """Sign up and verify a user; returns the verified profile (with token)."""

    def _make_user(name, email, password="password123", **profile):
        created = signup(name, email, password, **profile)
        response = client.post("/api/verify", json={"email": email, "code": created["debug_code"]})
        assert response.status_code == 200, response.text
        return response.json()

    return _make_user
