#!/usr/bin/env python3
"""Logging configuration

One format for every shiptrack service. The level comes from LOG_LEVEL and
can be raised or lowered for a single service with <SERVICE_NAME>_LOG_LEVEL,
e.g. SHIPMENT_SERVICE_LOG_LEVEL=DEBUG.
"""
import os
from dataclasses import dataclass

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _bool(val: str) -> bool:
    return val.lower() == "true"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    log_level: str = "INFO"
    log_format: str = DEFAULT_FORMAT
    log_file: str = ""
    enable_console: bool = True
    environment: str = "development"

    def level_for(self, service_name: str) -> str:
        """Effective level for one service"""
        override = os.getenv(f"{service_name.upper()}_LOG_LEVEL")
        return (override or self.log_level).upper()

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        """Load logging config from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO"),
            log_format=os.getenv("LOG_FORMAT", DEFAULT_FORMAT),
            log_file=os.getenv("LOG_FILE", ""),
            enable_console=_bool(os.getenv("LOG_CONSOLE", "true")),
            environment=env,
        )
