"""
Elastic Cache - Cache Module

Expiring key-value cache stored as documents in an Elasticsearch index.

Usage:
    from elastic_cache.cache import create_cache

    cache = create_cache()
    await cache.set("key", "value")
    value = await cache.get("key")
"""

from .backends import DeleteOutcome, ElasticCacheBackend
from .document import CacheEntry
from .factory import (
    close_all_caches,
    create_cache,
    create_client,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import CacheInterface
from .queries import MatchType, build_query

__all__ = [
    # Factory functions
    "create_cache",
    "create_client",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface and backend
    "CacheInterface",
    "ElasticCacheBackend",
    "DeleteOutcome",
    # Documents and queries
    "CacheEntry",
    "MatchType",
    "build_query",
]
