"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── shipment/    Shipment API over an in-memory store
    ├── auth/        Identity provider API over an in-memory user store
    └── mocks/       Mock implementations

Usage:
    pytest tests/component -v
    pytest tests/component/shipment -v
"""
import os
import sys

import pytest

# Set testing environment BEFORE any service imports
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("ENVIRONMENT", "testing")

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.jwt_manager import JWTManager, TokenClaims


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# Tokens
# =============================================================================

@pytest.fixture
def auth_headers():
    """Factory: Authorization header carrying a token signed by jwt_manager"""
    def _make(jwt_manager: JWTManager, user_id: str, username: str, is_admin: bool) -> dict:
        token = jwt_manager.create_access_token(
            TokenClaims(user_id=user_id, username=username, is_admin=is_admin)
        )
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def internal_headers() -> dict:
    """Headers accepted by internal-only endpoints"""
    return {
        "X-Internal-Service": "true",
        "X-Internal-Service-Secret": os.environ["INTERNAL_SERVICE_SECRET"],
    }
