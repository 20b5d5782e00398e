"""
Elastic Cache - Query Builders

Query bodies for locating and deleting cache documents by their key.

Keys are matched against the untokenized ``key.keyword`` field. Dynamic
mapping creates that subfield for existing indices, and INDEX_MAPPINGS
declares it for indices created by the cache. The analysed ``key`` text
field would let "foo" match "foo-bar" and would lowercase prefixes.
"""

from enum import Enum
from typing import Any

KEY_FIELD = "key.keyword"


class MatchType(str, Enum):
    """How a delete-by-query selects documents."""

    EXACT = "exact"
    PREFIX = "prefix"
    ALL = "all"


def match_key(key: str) -> dict[str, Any]:
    return {"term": {KEY_FIELD: key}}


def prefix_key(prefix: str) -> dict[str, Any]:
    return {"prefix": {KEY_FIELD: prefix}}


def match_all() -> dict[str, Any]:
    return {"match_all": {}}


def build_query(match_type: MatchType, term: str | None = None) -> dict[str, Any]:
    """
    Build the query clause for a match type.

    Args:
        match_type: Selection strategy
        term: Key or key prefix (ignored for MatchType.ALL)

    Returns:
        Query clause suitable for the ``query`` parameter of search/delete_by_query
    """
    if match_type is MatchType.ALL:
        return match_all()
    if term is None:
        raise ValueError(f"A term is required for {match_type.value} queries")
    if match_type is MatchType.EXACT:
        return match_key(term)
    return prefix_key(term)
