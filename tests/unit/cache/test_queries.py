"""
Elastic Cache - Query Builder Tests
"""

import pytest

from elastic_cache.cache.queries import MatchType, build_query


@pytest.mark.parametrize(
    ("match_type", "term", "expected"),
    [
        (MatchType.EXACT, "foo", {"term": {"key.keyword": "foo"}}),
        (MatchType.PREFIX, "hel", {"prefix": {"key.keyword": "hel"}}),
        (MatchType.ALL, None, {"match_all": {}}),
        (MatchType.ALL, "ignored", {"match_all": {}}),
    ],
)
def test_build_query(match_type: MatchType, term: str | None, expected: dict) -> None:
    """Each match type produces its query shape."""
    assert build_query(match_type, term) == expected


@pytest.mark.parametrize("match_type", [MatchType.EXACT, MatchType.PREFIX])
def test_term_required(match_type: MatchType) -> None:
    """Key and prefix queries need a term."""
    with pytest.raises(ValueError):
        build_query(match_type)


def test_keys_use_keyword_subfield() -> None:
    """Exact and prefix lookups never target the analysed key field."""
    for match_type in (MatchType.EXACT, MatchType.PREFIX):
        (clause,) = build_query(match_type, "Foo-Bar").values()
        assert clause == {"key.keyword": "Foo-Bar"}
