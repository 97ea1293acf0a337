"""Application configuration helpers."""

from __future__ import annotations

from .env import int_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .fees import FeeConfig, get_fee_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .ordering import OrderingConfig, get_ordering_config
from .square import SquareConfig, get_square_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_http_cache_path,
    get_storage_config,
)

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "FeeConfig",
    "MissingConfigurationError",
    "OrderingConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SquareConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_fee_config",
    "get_http_cache_path",
    "get_ordering_config",
    "get_square_config",
    "get_storage_config",
    "int_env_var",
    "require_env_var",
    "require_env_vars",
]
