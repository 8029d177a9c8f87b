"""
Component Test Fixtures for Auth Service

FastAPI TestClient over the identity provider with an in-memory user store.
"""

import os
import sys
from unittest.mock import patch

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.auth_service.auth_service import AuthService
from tests.component.mocks import MockAuthRepository


@pytest.fixture
def user_repository():
    """Store seeded with an admin, a clerk and a disabled account"""
    repo = MockAuthRepository()
    repo.add_user("dispatch_admin", "Adm1nPassw0rd", is_admin=True, user_id="usr_admin")
    repo.add_user("clerk", "Cl3rkPassw0rd", user_id="usr_clerk")
    repo.add_user("retired", "R3tiredPass", is_active=False, user_id="usr_retired")
    return repo


@pytest.fixture
def client(user_repository):
    """Create FastAPI test client with mocked dependencies"""
    from fastapi.testclient import TestClient
    from microservices.auth_service import main

    service = AuthService(repository=user_repository, jwt_manager=main.jwt_manager)

    with patch.object(main, "create_auth_service", lambda config, jwt_manager=None: service):
        with TestClient(main.app, raise_server_exceptions=False) as test_client:
            yield test_client


@pytest.fixture
def login(client):
    """Factory: log in and return the token"""
    def _login(username, password):
        response = client.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 200
        return response.json()["token"]
    return _login
