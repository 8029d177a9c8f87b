#!/usr/bin/env python3
"""Modular configuration system for shiptrack

Configuration hierarchy:
- infra_config: Infrastructure services (PostgreSQL)
- service_config: Peer shiptrack services (auth, shipment)
- logging_config: Logging configuration
- platform_config: Platform settings (auth, lifecycle) combining the above
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .service_config import PeerServiceConfig
from .platform_config import PlatformConfig

# Load environment file based on ENV
ENV_FILES = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}


def load_environment() -> str:
    """Load the env file for ENV without overriding real environment variables"""
    env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
    env_file = ENV_FILES.get(env, "deployment/environments/dev.env")
    load_dotenv(env_file, override=False)
    return env


__all__ = [
    # Main config
    'PlatformConfig',
    'load_environment',
    # Sub-configs
    'LoggingConfig',
    'InfraConfig',
    'PeerServiceConfig',
]
