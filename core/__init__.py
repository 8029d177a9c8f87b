#!/usr/bin/env python3
"""
Core Module for shiptrack microservices

Shared infrastructure for the auth and shipment services.

COMPONENTS:
    - config/: Environment-driven configuration dataclasses
    - config_manager.py: Per-service configuration resolution
    - logger.py: Service logging setup
    - postgres_client.py: asyncpg pool wrapper
    - jwt_manager.py: Session token issuing and verification
    - auth_dependencies.py: FastAPI authentication/authorization dependencies

USAGE:
    from core.config_manager import ConfigManager

    config = ConfigManager("shipment_service").get_service_config()
"""

__version__ = "1.0.0"
