#!/usr/bin/env python3
"""Shiptrack platform configuration

Main configuration shared by all shiptrack services.
Combines the sub-configs and holds auth and shipment-lifecycle settings.
"""
import os
from dataclasses import dataclass, field
from typing import Optional

from .infra_config import InfraConfig
from .logging_config import LoggingConfig
from .service_config import PeerServiceConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class PlatformConfig:
    """Main platform configuration with all sub-configs"""

    # Environment
    environment: str = "development"
    debug: bool = False

    # Default service settings (each microservice overrides the port)
    default_host: str = "0.0.0.0"
    default_port: int = 8000

    # JWT/Auth Configuration
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "shiptrack"
    jwt_expiration: int = 86400

    # Initial administrator, created at auth_service startup when missing
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    # Shipment lifecycle
    transition_policy: str = "permissive"

    # Sub-configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    infrastructure: InfraConfig = field(default_factory=InfraConfig)
    services: PeerServiceConfig = field(default_factory=PeerServiceConfig)

    @classmethod
    def from_env(cls) -> 'PlatformConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            # Environment
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),

            # Default service settings
            default_host=os.getenv("HOST", "0.0.0.0"),
            default_port=_int(os.getenv("PORT", "8000"), 8000),

            # JWT/Auth
            jwt_secret=os.getenv("JWT_SECRET"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_issuer=os.getenv("JWT_ISSUER", "shiptrack"),
            jwt_expiration=_int(os.getenv("JWT_EXPIRATION", "86400"), 86400),

            # Seeding
            admin_username=os.getenv("ADMIN_USERNAME"),
            admin_password=os.getenv("ADMIN_PASSWORD"),

            # Lifecycle
            transition_policy=os.getenv("SHIPMENT_TRANSITION_POLICY", "permissive"),

            # Load sub-configs
            logging=LoggingConfig.from_env(),
            infrastructure=InfraConfig.from_env(),
            services=PeerServiceConfig.from_env(),
        )
