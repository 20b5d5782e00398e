"""
Elastic Cache - Elasticsearch Cache Backend

Stores each cache entry as a document in an Elasticsearch index and uses the
document's age as the expiration signal:
- ``set`` upserts a document whose id is the cache key, with refresh=true so
  the next read observes the write
- ``get`` searches for the key and checks the age of the first hit whose
  key is equal to it; an expired hit is evicted before CacheExpiredError is raised
- ``clear``, ``clear_prefix`` and ``clear_all`` are delete-by-query calls
  with term, prefix and match_all query shapes on ``key.keyword``
- ``ensure_index`` creates the index with INDEX_MAPPINGS when it is missing

Deletions are best-effort: a failing delete-by-query is logged and handed
to the optional ``on_delete_error`` hook, but never raised to the caller.

Requires: elasticsearch[async]>=8

Example:
    client = AsyncElasticsearch("http://localhost:9200")
    cache = ElasticCacheBackend(client, index="sessions", expires_in=600)
    await cache.set("greeting", "hello")
    value = await cache.get("greeting")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from elasticsearch import ApiError, AsyncElasticsearch, TransportError

from ...config.schemas import DEFAULT_EXPIRES_IN_SECONDS, DEFAULT_INDEX
from ...errors import (
    CacheConnectionError,
    CacheError,
    CacheExpiredError,
    CacheNotFoundError,
    CacheOperationError,
    CacheQueryError,
    ConfigurationError,
    extract_error_code,
)
from ..document import INDEX_MAPPINGS, CacheEntry
from ..interface import CacheInterface
from ..queries import MatchType, build_query

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
DeleteErrorHook = Callable[[str, dict[str, Any], Exception], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _normalize_expires_in(expires_in: float | timedelta | None) -> timedelta:
    """None or non-positive durations fall back to the default age limit."""
    if expires_in is None:
        return timedelta(seconds=DEFAULT_EXPIRES_IN_SECONDS)
    if not isinstance(expires_in, timedelta):
        expires_in = timedelta(seconds=expires_in)
    if expires_in <= timedelta(0):
        return timedelta(seconds=DEFAULT_EXPIRES_IN_SECONDS)
    return expires_in


def _body(response: Any) -> dict[str, Any]:
    """Unwrap an API response object to its JSON body."""
    return getattr(response, "body", response) or {}


def _query_error(error: ApiError) -> CacheQueryError:
    """Convert an Elasticsearch API error into ``[status] type: reason`` form."""
    status = error.meta.status
    body = error.body
    error_type: str | None = None
    reason: str | None = None

    if isinstance(body, dict) and body.get("error") is not None:
        detail = body["error"]
        if isinstance(detail, dict):
            error_type = detail.get("type")
            reason = detail.get("reason")
        else:
            reason = str(detail)
    if error_type is None:
        error_type = error.message
    if reason is None:
        reason = str(body) if body else error.message

    return CacheQueryError(status, error_type, reason)


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of one delete-by-query call."""

    operation: str
    query: dict[str, Any]
    deleted: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ElasticCacheBackend(CacheInterface):
    """
    Cache backend storing entries as Elasticsearch documents.

    Notes:
    - The cache key doubles as the document id, so at most one entry exists per key.
    - Every entry shares the same age limit (``expires_in``); there is no per-key TTL.
    - Lookups use a ``term`` query on ``key.keyword`` and only the first hit whose
      stored key equals the requested key is used. Duplicate documents for a key
      are not expected and are ignored if present.
    - Reads are only as fresh as the index refresh allows; writes request an
      immediate refresh but concurrent writers to one key are not serialized.
    """

    def __init__(
        self,
        client: AsyncElasticsearch | None,
        index: str | None = DEFAULT_INDEX,
        expires_in: float | timedelta | None = DEFAULT_EXPIRES_IN_SECONDS,
        clock: Clock | None = None,
        on_delete_error: DeleteErrorHook | None = None,
    ) -> None:
        """
        Initialize the Elasticsearch cache backend.

        Args:
            client: Async Elasticsearch client (required)
            index: Index holding the cache documents (blank -> "gocache")
            expires_in: Age limit in seconds or as a timedelta (None or <= 0 -> 3600s)
            clock: Returns the current aware datetime; defaults to UTC wall clock
            on_delete_error: Called with (operation, query, error) when a deletion fails

        Raises:
            ConfigurationError: If no client is supplied
        """
        if client is None:
            raise ConfigurationError(
                "Elasticsearch client is required",
                details={"parameter": "client"},
            )

        self._client = client
        self.index = (index or "").strip() or DEFAULT_INDEX
        self.expires_in = _normalize_expires_in(expires_in)
        self._clock = clock or _utcnow
        self._on_delete_error = on_delete_error

        self._hits = 0
        self._misses = 0
        self._expired = 0
        self._sets = 0
        self._delete_requests = 0
        self._delete_failures = 0
        self._deleted = 0

    # ------------ Core Interface ------------

    async def set(self, key: str, value: str) -> None:
        """Upsert the entry for ``key``, resetting its age."""
        entry = CacheEntry.create(key, value, self._clock())

        try:
            await self._client.index(
                index=self.index,
                id=key,
                document=entry.to_document(),
                refresh="true",
            )
        except ApiError as e:
            error = _query_error(e)
            logger.error(
                f"Failed to index key '{key}': {error}",
                extra={"key": key, "index": self.index, "status": e.meta.status},
            )
            raise error from e
        except TransportError as e:
            logger.error(
                f"Elasticsearch unreachable while indexing key '{key}': {e}",
                extra={"key": key, "index": self.index, "error": str(e)},
            )
            raise CacheConnectionError("elasticsearch", details={"key": key, "error": str(e)}) from e

        self._sets += 1
        logger.debug(f"Stored key '{key}'", extra={"key": key, "index": self.index})

    async def get(self, key: str) -> str:
        """Return the value for ``key`` if present and not expired."""
        try:
            entry = await self._find(key)
        except CacheNotFoundError:
            self._misses += 1
            raise

        if self._is_expired(entry):
            self._expired += 1
            await self._evict(entry)
            raise CacheExpiredError(key, age_seconds=entry.age(self._clock()).total_seconds())

        self._hits += 1
        return entry.value

    async def is_valid(self, key: str) -> bool:
        """
        True iff ``get`` succeeds with a non-empty value.

        A stored empty string is therefore reported as invalid.
        """
        try:
            value = await self.get(key)
        except CacheError as e:
            logger.debug(
                f"Key '{key}' is not valid: {e}",
                extra={"key": key, "reason": e.message, "error_code": extract_error_code(e)},
            )
            return False
        return value != ""

    async def clear(self, key: str) -> None:
        """Delete all documents whose key matches ``key``."""
        self._report(await self._delete_by_query("clear", build_query(MatchType.EXACT, key)))

    async def clear_prefix(self, prefix: str) -> None:
        """Delete all documents whose key starts with ``prefix``."""
        self._report(await self._delete_by_query("clear_prefix", build_query(MatchType.PREFIX, prefix)))

    async def clear_all(self) -> None:
        """Delete every document in the index."""
        self._report(await self._delete_by_query("clear_all", build_query(MatchType.ALL)))

    async def ensure_index(self) -> bool:
        """
        Create the cache index with INDEX_MAPPINGS unless it already exists.

        Returns:
            True if the index was created by this call

        Raises:
            CacheQueryError: If Elasticsearch rejects the request
            CacheConnectionError: If Elasticsearch cannot be reached
        """
        try:
            if await self._client.indices.exists(index=self.index):
                return False
            await self._client.indices.create(index=self.index, mappings=INDEX_MAPPINGS)
        except ApiError as e:
            error = _query_error(e)
            # Lost a creation race with another writer
            if error.error_type == "resource_already_exists_exception":
                return False
            raise error from e
        except TransportError as e:
            raise CacheConnectionError("elasticsearch", details={"index": self.index, "error": str(e)}) from e

        logger.info(f"Created cache index '{self.index}'", extra={"index": self.index})
        return True

    async def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and backend reachability."""
        total_lookups = self._hits + self._misses + self._expired
        stats: dict[str, Any] = {
            "backend": "elasticsearch",
            "index": self.index,
            "expires_in": self.expires_in.total_seconds(),
            "hits": self._hits,
            "misses": self._misses,
            "expired": self._expired,
            "hit_rate": round((self._hits / total_lookups) * 100, 2) if total_lookups else 0.0,
            "sets": self._sets,
            "delete_requests": self._delete_requests,
            "delete_failures": self._delete_failures,
            "deleted": self._deleted,
            "connected": False,
        }

        try:
            stats["connected"] = bool(await self._client.ping())
        except Exception as e:
            logger.warning(f"Failed to ping Elasticsearch: {e}", extra={"error": str(e)})

        return stats

    async def close(self) -> None:
        """Close the Elasticsearch client and release resources."""
        try:
            await self._client.close()
            logger.info(f"Closed Elasticsearch cache backend for index '{self.index}'")
        except Exception as e:
            logger.error(
                f"Error closing Elasticsearch client: {e}",
                extra={"index": self.index, "error": str(e)},
                exc_info=True,
            )

    # ------------ Helpers ------------

    async def _find(self, key: str) -> CacheEntry:
        """
        Look up the entry for ``key``.

        The first hit whose stored key equals ``key`` is used; others are ignored.

        Raises:
            CacheNotFoundError: If the search has no usable hit
            CacheQueryError: If Elasticsearch rejects the search
            CacheConnectionError: If Elasticsearch cannot be reached
        """
        try:
            response = await self._client.search(
                index=self.index,
                query=build_query(MatchType.EXACT, key),
                track_total_hits=True,
            )
        except ApiError as e:
            raise _query_error(e) from e
        except TransportError as e:
            raise CacheConnectionError("elasticsearch", details={"key": key, "error": str(e)}) from e

        hits = (_body(response).get("hits") or {}).get("hits") or []
        for hit in hits:
            source = hit.get("_source")
            # Indices mapped by hand may answer the term query on an analysed field
            if source is not None and source.get("key") == key:
                return CacheEntry.from_source(source)

        raise CacheNotFoundError(key)

    def _is_expired(self, entry: CacheEntry | None) -> bool:
        """An absent entry is expired; otherwise expired once its age exceeds the limit."""
        if entry is None:
            return True
        return entry.age(self._clock()) > self.expires_in

    async def _evict(self, entry: CacheEntry) -> None:
        """Remove an entry found to be expired."""
        logger.debug(
            f"Evicting expired key '{entry.key}'",
            extra={"key": entry.key, "created_at": entry.created_at.isoformat()},
        )
        await self.clear(entry.key)

    async def _delete_by_query(self, operation: str, query: dict[str, Any]) -> DeleteOutcome:
        """Run one delete-by-query; failures are captured in the outcome, never raised."""
        self._delete_requests += 1
        try:
            response = await self._client.delete_by_query(
                index=self.index,
                query=query,
                conflicts="proceed",
                refresh=True,
            )
        except ApiError as e:
            return DeleteOutcome(operation, query, error=_query_error(e))
        except TransportError as e:
            return DeleteOutcome(
                operation,
                query,
                error=CacheConnectionError("elasticsearch", details={"operation": operation, "error": str(e)}),
            )

        body = _body(response)
        deleted = int(body.get("deleted") or 0)
        failures = body.get("failures") or []
        if failures:
            return DeleteOutcome(
                operation,
                query,
                deleted=deleted,
                error=CacheOperationError(
                    f"Delete-by-query reported {len(failures)} failure(s)",
                    details={"operation": operation, "failures": failures},
                ),
            )
        return DeleteOutcome(operation, query, deleted=deleted)

    def _report(self, outcome: DeleteOutcome) -> None:
        """Record a delete outcome; errors are logged and passed to the hook."""
        self._deleted += outcome.deleted

        if outcome.ok:
            logger.debug(
                f"{outcome.operation} removed {outcome.deleted} document(s)",
                extra={"operation": outcome.operation, "index": self.index, "deleted": outcome.deleted},
            )
            return

        self._delete_failures += 1
        logger.error(
            f"{outcome.operation} failed on index '{self.index}': {outcome.error}",
            extra={
                "operation": outcome.operation,
                "index": self.index,
                "query": outcome.query,
                "error_code": extract_error_code(outcome.error),  # type: ignore[arg-type]
            },
        )

        if self._on_delete_error is not None:
            try:
                self._on_delete_error(outcome.operation, outcome.query, outcome.error)  # type: ignore[arg-type]
            except Exception as e:
                logger.warning(
                    f"Delete error hook raised: {e}",
                    extra={"operation": outcome.operation, "error": str(e)},
                    exc_info=True,
                )
