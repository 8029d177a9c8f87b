"""
Unit Test Fixtures for Auth Service

Provides an in-memory user store and a service with a fixed JWT secret.
"""

import pytest

from core.jwt_manager import JWTManager
from microservices.auth_service.auth_service import AuthService
from tests.component.mocks import MockAuthRepository


@pytest.fixture
def jwt_manager():
    return JWTManager(secret_key="unit-test-secret", issuer="shiptrack")


@pytest.fixture
def auth_repository():
    """Store seeded with an admin and a regular user"""
    repo = MockAuthRepository()
    repo.add_user("dispatch_admin", "Adm1nPassw0rd", is_admin=True, user_id="usr_admin")
    repo.add_user("clerk", "Cl3rkPassw0rd", user_id="usr_clerk")
    return repo


@pytest.fixture
def auth_service(auth_repository, jwt_manager):
    return AuthService(repository=auth_repository, jwt_manager=jwt_manager)
