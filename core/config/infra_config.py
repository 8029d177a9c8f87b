#!/usr/bin/env python3
"""Infrastructure configuration

PostgreSQL connection settings shared by every shiptrack service.
"""
import os
from dataclasses import dataclass
from typing import Optional

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class InfraConfig:
    """Infrastructure service endpoints"""

    # ===========================================
    # PostgreSQL (native asyncpg - port 5432)
    # ===========================================
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "shiptrack"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"

    # Full DSN; wins over the discrete settings when present
    database_url: Optional[str] = None

    # Pool sizing
    postgres_pool_min: int = 1
    postgres_pool_max: int = 10
    postgres_command_timeout: int = 60

    @property
    def dsn(self) -> str:
        """Connection string for asyncpg"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @classmethod
    def from_env(cls) -> 'InfraConfig':
        """Load infrastructure config from environment"""
        return cls(
            postgres_host=os.getenv("POSTGRES_HOST", "localhost"),
            postgres_port=_int(os.getenv("POSTGRES_PORT", "5432"), 5432),
            postgres_db=os.getenv("POSTGRES_DB", "shiptrack"),
            postgres_user=os.getenv("POSTGRES_USER", "postgres"),
            postgres_password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            database_url=os.getenv("DATABASE_URL"),
            postgres_pool_min=_int(os.getenv("POSTGRES_POOL_MIN", "1"), 1),
            postgres_pool_max=_int(os.getenv("POSTGRES_POOL_MAX", "10"), 10),
            postgres_command_timeout=_int(os.getenv("POSTGRES_COMMAND_TIMEOUT", "60"), 60),
        )
