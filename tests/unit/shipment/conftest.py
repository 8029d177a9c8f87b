"""
Unit Test Fixtures for Shipment Service

Provides in-memory repository and service fixtures.
"""

import pytest

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.shipment_service.shipment_service import ShipmentService
from microservices.shipment_service.tracking_number import TrackingNumberGenerator
from tests.component.mocks import MockIdentityClient, MockShipmentRepository
from tests.fixtures import ScriptedRandom, make_shipment_create_request


@pytest.fixture
def mock_repository():
    """Fresh in-memory repository for each test"""
    return MockShipmentRepository()


@pytest.fixture
def identity_client():
    return MockIdentityClient()


@pytest.fixture
def shipment_service(mock_repository, identity_client):
    """Service with permissive policy and real generator over the mock store"""
    return ShipmentService(repository=mock_repository, identity_client=identity_client)


@pytest.fixture
def scripted_service(mock_repository):
    """Factory: service whose generator draws the given numbers in order"""
    def _make(values, **kwargs):
        generator = TrackingNumberGenerator(
            mock_repository.tracking_number_exists, rng=ScriptedRandom(values)
        )
        return ShipmentService(repository=mock_repository, generator=generator, **kwargs)
    return _make


@pytest.fixture
async def sample_shipment(shipment_service, admin_actor):
    """Pending shipment Lagos -> Accra created by an admin"""
    return await shipment_service.create_shipment(
        make_shipment_create_request(), actor=admin_actor
    )
