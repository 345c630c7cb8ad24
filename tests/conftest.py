"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from helpers import register_user

from taskmanager.config import Settings
from taskmanager.main import create_app


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a per-test data directory."""
    return Settings(
        _env_file=None,
        data_dir=tmp_path / "data",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        environment="test",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Create a test client for a fresh app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register_user(client, "test@mail.com", "testpass123", "Test User")
