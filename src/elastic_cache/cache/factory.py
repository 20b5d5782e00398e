"""
Elastic Cache - Cache Factory

Creates and tracks named cache instances.

Key points:
- The Elasticsearch client is built from ElasticsearchConfig unless one is injected
- Instances are registered by name so the same backend is reused across callers
- close_all_caches() must be called on shutdown to release client connections

Examples:
    from elastic_cache.cache.factory import create_cache

    # Uses env-configured cluster and index
    cache = create_cache()

    # Or explicitly supply a CacheConfig and client (e.g., for tests)
    from elastic_cache.config import CacheConfig
    cfg = CacheConfig(index="sessions", expires_in_seconds=600)
    cache = create_cache(cfg, name="sessions", client=my_client)
"""

from __future__ import annotations

import logging

from elasticsearch import AsyncElasticsearch

from ..config import CacheConfig, ElasticsearchConfig, get_config
from ..errors import ConfigurationError
from .backends.elasticsearch import DeleteErrorHook, ElasticCacheBackend
from .interface import CacheInterface

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, CacheInterface] = {}


def create_client(config: ElasticsearchConfig) -> AsyncElasticsearch:
    """
    Build an async Elasticsearch client from connection settings.

    Args:
        config: Elasticsearch connection configuration

    Returns:
        Configured AsyncElasticsearch client (connects lazily)
    """
    kwargs: dict[str, object] = {
        "hosts": config.hosts,
        "request_timeout": config.request_timeout,
        "max_retries": config.max_retries,
        "retry_on_timeout": config.max_retries > 0,
    }
    # TLS options are rejected for plain http nodes
    if any(host.startswith("https://") for host in config.hosts):
        kwargs["verify_certs"] = config.verify_certs
    if config.api_key:
        kwargs["api_key"] = config.api_key
    elif config.username and config.password:
        kwargs["basic_auth"] = (config.username, config.password)

    return AsyncElasticsearch(**kwargs)  # type: ignore[arg-type]


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
    client: AsyncElasticsearch | None = None,
    on_delete_error: DeleteErrorHook | None = None,
) -> CacheInterface:
    """
    Create a cache backend instance based on configuration.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Cache instance name (for multiple cache instances)
        client: Pre-built Elasticsearch client; built from config when omitted
        on_delete_error: Hook receiving swallowed delete-by-query failures

    Returns:
        Configured cache backend instance

    Raises:
        ConfigurationError: If the backend cannot be constructed
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    logger.info(
        "Creating cache instance '%s' on index: %s",
        name,
        config.index,
        extra={"cache_name": name, "index": config.index},
    )

    try:
        if client is None:
            client = create_client(config.elasticsearch)

        cache = ElasticCacheBackend(
            client=client,
            index=config.index,
            expires_in=config.expires_in_seconds,
            on_delete_error=on_delete_error,
        )
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error creating cache instance '%s': %s",
            name,
            e,
            extra={"cache_name": name, "index": config.index, "error": str(e)},
            exc_info=True,
        )
        raise ConfigurationError(
            f"Failed to create cache instance '{name}': {e}",
            details={"cache_name": name, "index": config.index, "error": str(e)},
        ) from e

    _cache_instances[name] = cache
    logger.info(
        "Cache instance '%s' created successfully",
        name,
        extra={"cache_name": name, "index": config.index},
    )
    return cache


def get_cache(name: str = "default") -> CacheInterface:
    """
    Get an existing cache instance by name.

    If the instance doesn't exist, it will be created automatically
    using the global configuration.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


async def close_all_caches() -> None:
    """Close all cache instances and release their clients."""
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            await cache.close()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Forget all registered instances without closing them.

    Warning: Only use this in testing contexts.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
