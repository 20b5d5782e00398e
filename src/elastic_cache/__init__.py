"""
Elastic Cache

Pluggable key-value cache backend that keeps entries as Elasticsearch
documents and expires them by age at read time.
"""

from .cache import (
    CacheEntry,
    CacheInterface,
    ElasticCacheBackend,
    close_all_caches,
    create_cache,
    get_cache,
)
from .config import CacheConfig, ElasticCacheConfig, ElasticsearchConfig, load_config
from .errors import (
    CacheConnectionError,
    CacheError,
    CacheExpiredError,
    CacheNotFoundError,
    CacheOperationError,
    CacheQueryError,
    CacheSerializationError,
    ConfigurationError,
    ElasticCacheError,
)
from .logging_setup import configure_logging

__version__ = "1.0.0"

__all__ = [
    "CacheInterface",
    "ElasticCacheBackend",
    "CacheEntry",
    "create_cache",
    "get_cache",
    "close_all_caches",
    "CacheConfig",
    "ElasticCacheConfig",
    "ElasticsearchConfig",
    "load_config",
    "configure_logging",
    "ElasticCacheError",
    "ConfigurationError",
    "CacheError",
    "CacheNotFoundError",
    "CacheExpiredError",
    "CacheSerializationError",
    "CacheOperationError",
    "CacheQueryError",
    "CacheConnectionError",
]
