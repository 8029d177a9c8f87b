"""
Shipment Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that imports I/O-dependent modules (repository, pool).

Usage:
    from .factory import create_shipment_service
    service = create_shipment_service(service_config)
"""
from typing import Optional

from core.config_manager import ServiceConfig

from .protocols import IdentityClientProtocol
from .shipment_service import ShipmentService
from .status_policy import get_transition_policy


def create_shipment_service(
    config: ServiceConfig,
    identity_client: Optional[IdentityClientProtocol] = None,
) -> ShipmentService:
    """
    Create ShipmentService with real dependencies.

    This function imports the real repository (which has I/O dependencies).
    Use this in production, NOT in tests. The pool is opened lazily; the
    lifespan calls repository.initialize() and repository.close().

    Args:
        config: Resolved service configuration
        identity_client: Optional client resolving creator usernames

    Returns:
        ShipmentService: Configured service instance with real repository
    """
    # Import real repository here (not at module level)
    from core.postgres_client import PostgresClient
    from .shipment_repository import ShipmentRepository

    db = PostgresClient(
        config.database_dsn,
        service_name=config.service_name,
        min_size=config.pool_min_size,
        max_size=config.pool_max_size,
        command_timeout=config.command_timeout,
    )
    repository = ShipmentRepository(db)

    return ShipmentService(
        repository=repository,
        transition_policy=get_transition_policy(config.transition_policy),
        identity_client=identity_client,
    )
