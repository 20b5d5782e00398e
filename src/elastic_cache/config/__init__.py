"""
Elastic Cache - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config
from .schemas import (
    DEFAULT_EXPIRES_IN_SECONDS,
    DEFAULT_INDEX,
    CacheConfig,
    ElasticCacheConfig,
    ElasticsearchConfig,
    LogFormat,
    LogLevel,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    # Main config
    "ElasticCacheConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Config sections
    "CacheConfig",
    "ElasticsearchConfig",
    # Defaults
    "DEFAULT_INDEX",
    "DEFAULT_EXPIRES_IN_SECONDS",
]
