"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - integration/: Repository tests against a real PostgreSQL
                    (set SHIPTRACK_TEST_DATABASE_URL)
    - component/  : FastAPI apps with mocked dependencies
    - unit/       : Services and pure logic with in-memory repositories
"""
import os
import sys

import pytest

# Set testing environment BEFORE any service imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("JWT_SECRET", "shiptrack-test-secret-not-for-production-use-0123456789")
os.environ.setdefault("INTERNAL_SERVICE_SECRET", "test-internal-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from core.auth_dependencies import AuthenticatedUser
from tests.fixtures import make_user_id


# =============================================================================
# Test Configuration
# =============================================================================

class TestConfig:
    """Centralized test configuration"""

    SERVICES = {
        "auth_service": 8201,
        "shipment_service": 8230,
    }

    DATABASE_URL = os.getenv("SHIPTRACK_TEST_DATABASE_URL")

    @classmethod
    def get_service_url(cls, service_name: str) -> str:
        port = cls.SERVICES.get(service_name)
        if not port:
            raise ValueError(f"Unknown service: {service_name}")
        return f"http://localhost:{port}"


@pytest.fixture(scope="session")
def test_config() -> TestConfig:
    """Provide test configuration"""
    return TestConfig()


# =============================================================================
# Actors
# =============================================================================

@pytest.fixture
def admin_actor() -> AuthenticatedUser:
    """Authenticated administrator"""
    return AuthenticatedUser(user_id=make_user_id(), username="dispatch_admin", is_admin=True)


@pytest.fixture
def regular_actor() -> AuthenticatedUser:
    """Authenticated non-admin user"""
    return AuthenticatedUser(user_id=make_user_id(), username="regular_user", is_admin=False)
