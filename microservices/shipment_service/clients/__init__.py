"""
Clients module for shipment_service

HTTP clients for synchronous service-to-service communication
"""

from .auth_client import AuthClient

__all__ = [
    "AuthClient",
]
