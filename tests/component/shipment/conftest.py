"""
Component Test Fixtures for Shipment Service

FastAPI TestClient over the real app with the storage layer replaced by the
in-memory repository. The app's own lifespan runs against the mocks.
"""

import os
import sys
from unittest.mock import patch

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.shipment_service.shipment_service import ShipmentService
from tests.component.mocks import MockIdentityClient, MockShipmentRepository


@pytest.fixture
def mock_repository():
    return MockShipmentRepository()


@pytest.fixture
def identity_client():
    return MockIdentityClient(usernames={"usr_admin": "dispatch_admin"})


@pytest.fixture
def service(mock_repository, identity_client):
    return ShipmentService(repository=mock_repository, identity_client=identity_client)


@pytest.fixture
def client(service):
    """Create FastAPI test client with mocked dependencies"""
    from fastapi.testclient import TestClient

    with patch(
        "microservices.shipment_service.main.create_shipment_service",
        lambda config, identity_client=None: service,
    ):
        from microservices.shipment_service.main import app

        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client


@pytest.fixture
def jwt_manager():
    """The app's token verifier"""
    from microservices.shipment_service.main import app
    return app.state.jwt_manager


@pytest.fixture
def admin_headers(auth_headers, jwt_manager):
    return auth_headers(jwt_manager, "usr_admin", "dispatch_admin", True)


@pytest.fixture
def user_headers(auth_headers, jwt_manager):
    return auth_headers(jwt_manager, "usr_clerk", "clerk", False)


@pytest.fixture
def created_shipment(client, admin_headers):
    """Shipment created through the API (wire format)"""
    from tests.fixtures import make_shipment_payload

    response = client.post("/api/shipments", json=make_shipment_payload(), headers=admin_headers)
    assert response.status_code == 201
    return response.json()
