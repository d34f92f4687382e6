"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogSourceConfig, SeedConfig, get_catalog_source_config, get_seed_config
from .env import optional_env_int, optional_env_str
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "CacheConfig",
    "CatalogSourceConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SeedConfig",
    "StorageConfig",
    "configure_logging",
    "get_catalog_source_config",
    "get_database_config",
    "get_seed_config",
    "get_storage_config",
    "optional_env_int",
    "optional_env_str",
]
