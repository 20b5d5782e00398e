"""
Cache Usage Example

Demonstrates the Elasticsearch-backed cache against a local cluster.

This example shows:
- Building the cache from environment configuration
- Storing and reading entries
- Prefix and full invalidation
- Observing swallowed delete failures through the hook

Requires an Elasticsearch node (ELASTICSEARCH_HOSTS, default http://localhost:9200).
"""

import asyncio
import logging
from typing import Any

from elastic_cache import CacheError, configure_logging, create_cache, load_config
from elastic_cache.cache import close_all_caches

logger = logging.getLogger("elastic_cache.example")


def report_delete_failure(operation: str, query: dict[str, Any], error: Exception) -> None:
    logger.warning(f"{operation} with {query} did not complete: {error}")


async def example_round_trip() -> None:
    """Example: set, read back and clear one key."""
    logger.info("=" * 60)
    logger.info("Example 1: Round trip")
    logger.info("=" * 60)

    cache = create_cache(on_delete_error=report_delete_failure)
    await cache.ensure_index()

    await cache.set("foo", "bar")
    logger.info(f"is_valid('foo') -> {await cache.is_valid('foo')}")
    logger.info(f"get('foo') -> {await cache.get('foo')!r}")

    await cache.clear("foo")
    logger.info(f"after clear, is_valid('foo') -> {await cache.is_valid('foo')}")


async def example_prefix_clear() -> None:
    """Example: clear every key under a prefix."""
    logger.info("=" * 60)
    logger.info("Example 2: Prefix invalidation")
    logger.info("=" * 60)

    cache = create_cache()

    await cache.set("hello", "world")
    await cache.set("heli", "copter")
    await cache.set("kitty", "hello")

    await cache.clear_prefix("hel")

    for key in ("hello", "heli", "kitty"):
        try:
            logger.info(f"get({key!r}) -> {await cache.get(key)!r}")
        except CacheError as e:
            logger.info(f"get({key!r}) -> {e.__class__.__name__}: {e}")

    await cache.clear_all()
    logger.info(f"stats: {await cache.get_stats()}")


async def main() -> None:
    """Run all examples."""
    config = load_config()
    configure_logging(config.log_level, config.log_format)

    try:
        await example_round_trip()
        await example_prefix_clear()
    finally:
        logger.info("Closing caches...")
        await close_all_caches()
        logger.info("Done!")


if __name__ == "__main__":
    asyncio.run(main())
