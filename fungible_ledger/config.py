"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class LedgerConfig(BaseSettings):
    """Fungible ledger configuration"""

    # Storage configuration
    storage_backend: str = "memory"  # memory or sqlite
    database_path: str = "fungible_ledger.db"

    # Arithmetic configuration
    amount_kind: str = "uint"  # uint or decimal
    amount_bits: int = 128
    token_id_bits: int = 32
    decimal_places: int = 18
    decimal_max: str = "1e30"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8091

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    # Feature flags
    enable_audit_logging: bool = True

    class Config:
        env_prefix = "FUNGIBLE_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
