"""
Authentication Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that imports I/O-dependent modules (repository, pool).
"""
from typing import Optional

from core.config_manager import ServiceConfig
from core.jwt_manager import JWTManager

from .auth_service import AuthService


def create_jwt_manager(config: ServiceConfig) -> JWTManager:
    """JWT manager configured from the service config"""
    return JWTManager(
        secret_key=config.jwt_secret,
        algorithm=config.jwt_algorithm,
        issuer=config.jwt_issuer,
        access_token_expiry=config.jwt_expiration,
    )


def create_auth_service(
    config: ServiceConfig,
    jwt_manager: Optional[JWTManager] = None,
) -> AuthService:
    """
    Create AuthService with real dependencies.

    Use this in production, NOT in tests.

    Args:
        config: Resolved service configuration
        jwt_manager: Token manager shared with the API layer

    Returns:
        AuthService: Configured service instance with real repository
    """
    # Import real repository here (not at module level)
    from core.postgres_client import PostgresClient
    from .auth_repository import AuthRepository

    db = PostgresClient(
        config.database_dsn,
        service_name=config.service_name,
        min_size=config.pool_min_size,
        max_size=config.pool_max_size,
        command_timeout=config.command_timeout,
    )

    return AuthService(
        repository=AuthRepository(db),
        jwt_manager=jwt_manager or create_jwt_manager(config),
    )
