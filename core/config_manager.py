"""
Configuration Manager

Per-service view over the platform configuration.

Usage:
    from core.config_manager import ConfigManager

    config_manager = ConfigManager("shipment_service")
    config = config_manager.get_service_config()
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from core.config import PlatformConfig, load_environment

logger = logging.getLogger(__name__)


# Default ports per service (override with <SERVICE_NAME>_PORT)
SERVICE_PORTS = {
    "auth_service": 8201,
    "shipment_service": 8230,
}


@dataclass
class ServiceConfig:
    """Resolved configuration for one service"""
    service_name: str
    service_host: str
    service_port: int
    environment: str
    debug: bool
    log_level: str
    log_format: str
    log_file: str

    # Database
    database_dsn: str
    pool_min_size: int
    pool_max_size: int
    command_timeout: int

    # Auth
    jwt_secret: Optional[str]
    jwt_algorithm: str
    jwt_issuer: str
    jwt_expiration: int
    admin_username: Optional[str]
    admin_password: Optional[str]

    # Shipment lifecycle
    transition_policy: str

    # Peer services
    auth_service_url: str
    internal_service_secret: str


class ConfigManager:
    """Builds a ServiceConfig for a named service from the environment"""

    def __init__(self, service_name: str, platform: Optional[PlatformConfig] = None):
        self.service_name = service_name
        if platform is None:
            load_environment()
            platform = PlatformConfig.from_env()
        self.platform = platform
        self._service_config: Optional[ServiceConfig] = None

    def get_service_config(self) -> ServiceConfig:
        """Return the (cached) config for this service"""
        if self._service_config is None:
            self._service_config = self._build()
        return self._service_config

    def _build(self) -> ServiceConfig:
        platform = self.platform
        default_port = SERVICE_PORTS.get(self.service_name, platform.default_port)
        port_env = os.getenv(f"{self.service_name.upper()}_PORT")
        try:
            port = int(port_env) if port_env else default_port
        except ValueError:
            logger.warning(f"Invalid port '{port_env}' for {self.service_name}, using {default_port}")
            port = default_port

        infra = platform.infrastructure
        return ServiceConfig(
            service_name=self.service_name,
            service_host=platform.default_host,
            service_port=port,
            environment=platform.environment,
            debug=platform.debug,
            log_level=platform.logging.level_for(self.service_name),
            log_format=platform.logging.log_format,
            log_file=platform.logging.log_file,
            database_dsn=infra.dsn,
            pool_min_size=infra.postgres_pool_min,
            pool_max_size=infra.postgres_pool_max,
            command_timeout=infra.postgres_command_timeout,
            jwt_secret=platform.jwt_secret,
            jwt_algorithm=platform.jwt_algorithm,
            jwt_issuer=platform.jwt_issuer,
            jwt_expiration=platform.jwt_expiration,
            admin_username=platform.admin_username,
            admin_password=platform.admin_password,
            transition_policy=platform.transition_policy,
            auth_service_url=platform.services.auth_service_url,
            internal_service_secret=platform.services.internal_service_secret,
        )

    def print_config_summary(self, show_secrets: bool = False) -> None:
        """Log the resolved configuration (development aid)"""
        config = self.get_service_config()
        hidden = "***"
        logger.info(f"Configuration for {config.service_name} ({config.environment})")
        logger.info(f"  listen: {config.service_host}:{config.service_port}")
        logger.info(f"  log level: {config.log_level}")
        logger.info(f"  database: {config.database_dsn if show_secrets else _mask_dsn(config.database_dsn)}")
        logger.info(f"  jwt secret: {config.jwt_secret if show_secrets else hidden}")
        logger.info(f"  transition policy: {config.transition_policy}")
        logger.info(f"  auth service: {config.auth_service_url}")


def _mask_dsn(dsn: str) -> str:
    """Hide the password part of a postgres DSN"""
    if "@" not in dsn or "://" not in dsn:
        return dsn
    scheme, rest = dsn.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


__all__ = ["ConfigManager", "ServiceConfig", "SERVICE_PORTS"]
