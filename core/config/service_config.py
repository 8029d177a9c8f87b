#!/usr/bin/env python3
"""Peer service configuration

Endpoints of the other shiptrack services a service may call over HTTP,
plus the shared secret used for internal service-to-service requests.
"""
import os
from dataclasses import dataclass


@dataclass
class PeerServiceConfig:
    """Peer service endpoints"""

    # Identity provider
    auth_service_url: str = "http://localhost:8201"

    # Internal calls (X-Internal-Service / X-Internal-Service-Secret headers)
    internal_service_secret: str = "dev-internal-secret-change-in-production"

    @classmethod
    def from_env(cls) -> 'PeerServiceConfig':
        """Load peer service configuration from environment variables"""
        return cls(
            auth_service_url=os.getenv("AUTH_SERVICE_URL", "http://localhost:8201"),
            internal_service_secret=os.getenv(
                "INTERNAL_SERVICE_SECRET",
                "dev-internal-secret-change-in-production"
            ),
        )
