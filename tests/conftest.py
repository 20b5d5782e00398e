"""
Elastic Cache - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
Unit tests run against an in-memory stand-in for AsyncElasticsearch; integration
tests need a live cluster and are skipped when none is reachable.
"""

import copy
import os
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any

import pytest
import pytest_asyncio
from elasticsearch import ApiError, AsyncElasticsearch, BadRequestError, NotFoundError

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"

TEST_ELASTICSEARCH_URL = os.environ.get("TEST_ELASTICSEARCH_URL", "http://localhost:9200")


def make_api_error(
    status: int,
    error_type: str,
    reason: str,
    error_cls: type[ApiError] = ApiError,
) -> ApiError:
    """Build an Elasticsearch API error carrying a structured error body."""
    body = {"error": {"type": error_type, "reason": reason, "root_cause": [{"reason": reason}]}, "status": status}
    return error_cls(message=error_type, meta=SimpleNamespace(status=status), body=body)  # type: ignore[arg-type]


class FakeClock:
    """Manually advanced clock returning aware UTC datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, **kwargs: float) -> None:
        self.now += timedelta(seconds=seconds, **kwargs)


class FakeIndicesClient:
    """The ``client.indices`` namespace of FakeElasticsearch."""

    def __init__(self, parent: "FakeElasticsearch") -> None:
        self._parent = parent

    async def exists(self, **kwargs: Any) -> bool:
        self._parent._record("indices.exists", **kwargs)
        return kwargs["index"] in self._parent.docs

    async def create(self, **kwargs: Any) -> dict[str, Any]:
        self._parent._record("indices.create", **kwargs)
        index = kwargs["index"]
        if index in self._parent.docs:
            raise make_api_error(
                400, "resource_already_exists_exception", f"index [{index}] already exists", BadRequestError
            )
        self._parent.docs[index] = {}
        self._parent.mappings[index] = copy.deepcopy(kwargs.get("mappings") or {})
        return {"acknowledged": True, "index": index}


class FakeElasticsearch:
    """
    In-memory stand-in for AsyncElasticsearch.

    Supports the index/search/delete_by_query calls the cache makes. Only the
    exact ``key.keyword`` field is understood: ``term`` compares by equality and
    ``prefix`` by case-sensitive startswith. Any other query shape raises.
    Assign an exception to ``errors[<method>]`` to make that call fail.
    """

    def __init__(self) -> None:
        self.docs: dict[str, dict[str, dict[str, Any]]] = {}
        self.mappings: dict[str, dict[str, Any]] = {}
        self.indices = FakeIndicesClient(self)
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.errors: dict[str, Exception] = {}
        self.delete_failures: list[dict[str, Any]] = []
        self.closed = False

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, kwargs))
        error = self.errors.get(method)
        if error is not None:
            raise error

    def _missing_index(self, index: str) -> NotFoundError:
        return make_api_error(  # type: ignore[return-value]
            404, "index_not_found_exception", f"no such index [{index}]", NotFoundError
        )

    @staticmethod
    def _matches(query: dict[str, Any], source: dict[str, Any]) -> bool:
        if "match_all" in query:
            return True
        if "term" in query:
            return source.get("key") == query["term"]["key.keyword"]
        if "prefix" in query:
            return str(source.get("key", "")).startswith(query["prefix"]["key.keyword"])
        raise ValueError(f"Unsupported query: {query}")

    def calls_to(self, method: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == method]

    def add_document(self, index: str, doc_id: str, source: dict[str, Any]) -> None:
        self.docs.setdefault(index, {})[doc_id] = copy.deepcopy(source)

    async def index(self, **kwargs: Any) -> dict[str, Any]:
        self._record("index", **kwargs)
        docs = self.docs.setdefault(kwargs["index"], {})
        result = "updated" if kwargs["id"] in docs else "created"
        docs[kwargs["id"]] = copy.deepcopy(kwargs["document"])
        return {"_index": kwargs["index"], "_id": kwargs["id"], "result": result}

    async def search(self, **kwargs: Any) -> dict[str, Any]:
        self._record("search", **kwargs)
        if kwargs["index"] not in self.docs:
            raise self._missing_index(kwargs["index"])
        hits = [
            {"_index": kwargs["index"], "_id": doc_id, "_source": copy.deepcopy(source)}
            for doc_id, source in self.docs[kwargs["index"]].items()
            if self._matches(kwargs["query"], source)
        ]
        return {"hits": {"total": {"value": len(hits), "relation": "eq"}, "hits": hits}}

    async def delete_by_query(self, **kwargs: Any) -> dict[str, Any]:
        self._record("delete_by_query", **kwargs)
        if kwargs["index"] not in self.docs:
            raise self._missing_index(kwargs["index"])
        docs = self.docs[kwargs["index"]]
        doomed = [doc_id for doc_id, source in docs.items() if self._matches(kwargs["query"], source)]
        for doc_id in doomed:
            del docs[doc_id]
        return {"deleted": len(doomed), "failures": list(self.delete_failures)}

    async def ping(self, **kwargs: Any) -> bool:
        self._record("ping", **kwargs)
        return True

    async def close(self) -> None:
        self._record("close")
        self.closed = True


@pytest.fixture
def fake_client() -> FakeElasticsearch:
    """Fresh in-memory Elasticsearch stand-in."""
    return FakeElasticsearch()


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock frozen at 2024-01-01T12:00:00Z until advanced."""
    return FakeClock()


@pytest.fixture
def api_error() -> Callable[..., ApiError]:
    """Factory for structured Elasticsearch API errors."""
    return make_api_error


@pytest.fixture
def test_index() -> str:
    """Index name used by integration tests."""
    return os.environ.get("TEST_ELASTICSEARCH_INDEX", "elastic-cache-test")


@pytest_asyncio.fixture
async def es_client(test_index: str) -> AsyncGenerator[AsyncElasticsearch, None]:
    """
    Create a live Elasticsearch client for integration tests.

    Skips the test if the cluster does not answer, and deletes the test
    index before and after each test.
    """
    client = AsyncElasticsearch(TEST_ELASTICSEARCH_URL, request_timeout=5)

    try:
        if not await client.ping():
            raise RuntimeError("ping returned false")
    except Exception as e:
        await client.close()
        pytest.skip(f"Elasticsearch not available for testing: {e}")

    await client.options(ignore_status=404).indices.delete(index=test_index)

    yield client

    try:
        await client.options(ignore_status=404).indices.delete(index=test_index)
    finally:
        await client.close()


@pytest.fixture
def mock_env_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for the cache configuration."""
    monkeypatch.setenv("CACHE_INDEX", "env-index")
    monkeypatch.setenv("CACHE_EXPIRES_IN_SECONDS", "120")
    monkeypatch.setenv("ELASTICSEARCH_HOSTS", "http://es1:9200, http://es2:9200")
    monkeypatch.setenv("ELASTICSEARCH_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("ELASTICSEARCH_MAX_RETRIES", "1")


@pytest.fixture(autouse=True)
def reset_cache_factory() -> Generator[None, None, None]:
    """Reset cache factory and config singleton after each test to prevent state leakage."""
    yield
    from elastic_cache.cache.factory import reset_cache_factory
    from elastic_cache.config import loader

    reset_cache_factory()
    loader._config_instance = None
