"""Configuration management module."""

from omd.core.config.settings import (
    CREDENTIAL_ENV_VARS,
    CacheConfig,
    ConfigManager,
    LoggingConfig,
    OmdConfig,
    ProviderConfig,
    deep_update,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "CREDENTIAL_ENV_VARS",
    "ConfigManager",
    "OmdConfig",
    "CacheConfig",
    "ProviderConfig",
    "LoggingConfig",
    "deep_update",
    "get_default_config",
    "load_config_from_env",
]
