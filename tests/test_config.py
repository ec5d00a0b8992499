"""
Tests for configuration management
"""

import pytest

from fungible_ledger import config as config_module
from fungible_ledger.config import LedgerConfig, get_config, reload_config


@pytest.fixture(autouse=True)
def restore_config():
    original = config_module.config
    yield
    config_module.config = original


class TestLedgerConfig:
    """Test settings defaults and environment overrides"""

    def test_defaults(self, monkeypatch):
        for name in ("STORAGE_BACKEND", "AMOUNT_KIND", "AMOUNT_BITS", "TOKEN_ID_BITS", "API_PORT"):
            monkeypatch.delenv(f"FUNGIBLE_{name}", raising=False)
        settings = LedgerConfig()

        assert settings.storage_backend == "memory"
        assert settings.amount_kind == "uint"
        assert settings.amount_bits == 128
        assert settings.token_id_bits == 32
        assert settings.api_port == 8091
        assert settings.enable_audit_logging is True

    def test_environment_overrides(self, monkeypatch):
        """Test that FUNGIBLE_* variables configure the ledger"""
        monkeypatch.setenv("FUNGIBLE_STORAGE_BACKEND", "sqlite")
        monkeypatch.setenv("FUNGIBLE_AMOUNT_BITS", "64")
        monkeypatch.setenv("fungible_log_level", "DEBUG")
        monkeypatch.setenv("FUNGIBLE_ENABLE_AUDIT_LOGGING", "false")

        settings = LedgerConfig()

        assert settings.storage_backend == "sqlite"
        assert settings.amount_bits == 64
        assert settings.log_level == "DEBUG"
        assert settings.enable_audit_logging is False

    def test_reload_config(self, monkeypatch):
        """Test that reloading picks up new environment values"""
        monkeypatch.setenv("FUNGIBLE_API_PORT", "9100")

        reloaded = reload_config()

        assert reloaded.api_port == 9100
        assert get_config() is reloaded
