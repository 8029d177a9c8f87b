"""
Component Test Mocks

Shared mock implementations for unit and component testing.
These mocks replace real I/O dependencies (database, HTTP).
"""

from .shipment_mocks import MockShipmentRepository, MockIdentityClient
from .auth_mocks import MockAuthRepository

__all__ = [
    'MockShipmentRepository',
    'MockIdentityClient',
    'MockAuthRepository',
]
