"""
Unit Tests for service configuration
"""

import pytest

from core.config import PlatformConfig
from core.config_manager import ConfigManager, _mask_dsn
from core.config.infra_config import InfraConfig

pytestmark = pytest.mark.unit


@pytest.fixture
def clean_env(monkeypatch):
    for name in [
        "DATABASE_URL", "POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_DB",
        "SHIPMENT_SERVICE_PORT", "AUTH_SERVICE_PORT", "SHIPMENT_TRANSITION_POLICY",
        "JWT_EXPIRATION", "AUTH_SERVICE_URL",
        "LOG_LEVEL", "SHIPMENT_SERVICE_LOG_LEVEL", "AUTH_SERVICE_LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _config(service_name):
    return ConfigManager(service_name, platform=PlatformConfig.from_env()).get_service_config()


class TestServiceConfig:

    def test_default_ports(self, clean_env):
        assert _config("shipment_service").service_port == 8230
        assert _config("auth_service").service_port == 8201

    def test_port_override(self, clean_env):
        clean_env.setenv("SHIPMENT_SERVICE_PORT", "9100")
        assert _config("shipment_service").service_port == 9100

    def test_invalid_port_falls_back(self, clean_env):
        clean_env.setenv("SHIPMENT_SERVICE_PORT", "not-a-port")
        assert _config("shipment_service").service_port == 8230

    def test_lifecycle_and_auth_defaults(self, clean_env):
        config = _config("shipment_service")

        assert config.transition_policy == "permissive"
        assert config.jwt_expiration == 86400
        assert config.jwt_algorithm == "HS256"
        assert config.auth_service_url == "http://localhost:8201"

    def test_transition_policy_from_env(self, clean_env):
        clean_env.setenv("SHIPMENT_TRANSITION_POLICY", "strict")
        assert _config("shipment_service").transition_policy == "strict"

    def test_log_level_per_service_override(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "WARNING")
        clean_env.setenv("SHIPMENT_SERVICE_LOG_LEVEL", "debug")

        assert _config("shipment_service").log_level == "DEBUG"
        assert _config("auth_service").log_level == "WARNING"

    def test_config_is_cached(self, clean_env):
        manager = ConfigManager("shipment_service", platform=PlatformConfig.from_env())
        assert manager.get_service_config() is manager.get_service_config()


class TestDatabaseDsn:

    def test_dsn_from_parts(self, clean_env):
        clean_env.setenv("POSTGRES_HOST", "db.internal")
        clean_env.setenv("POSTGRES_DB", "tracking")

        dsn = InfraConfig.from_env().dsn

        assert dsn.startswith("postgresql://")
        assert dsn.endswith("@db.internal:5432/tracking")

    def test_database_url_wins(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql://u:p@elsewhere:6543/x")
        clean_env.setenv("POSTGRES_HOST", "ignored")

        assert _config("shipment_service").database_dsn == "postgresql://u:p@elsewhere:6543/x"

    @pytest.mark.parametrize("dsn, masked", [
        ("postgresql://app:hunter2@db:5432/ship", "postgresql://app:***@db:5432/ship"),
        ("postgresql://db:5432/ship", "postgresql://db:5432/ship"),
    ])
    def test_mask_dsn(self, dsn, masked):
        assert _mask_dsn(dsn) == masked
