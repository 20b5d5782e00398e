"""
Elastic Cache - Cache Entry Document

A cache entry is persisted as one JSON document:

    {"key": "...", "value": "...", "created_at": "<RFC 3339 timestamp>"}

The field names are part of the storage contract and must not change,
otherwise existing indices become unreadable.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import CacheSerializationError

# Matches what dynamic mapping produces for ``key`` (text plus a keyword
# subfield) so indices created either way answer the same queries. The
# keyword limit is raised from the dynamic default of 256 characters;
# longer keys would not be indexed in the subfield and could never be found.
INDEX_MAPPINGS: dict[str, Any] = {
    "properties": {
        "key": {
            "type": "text",
            "fields": {"keyword": {"type": "keyword", "ignore_above": 8191}},
        },
        "value": {"type": "text", "index": False},
        "created_at": {"type": "date"},
    }
}


class CacheEntry(BaseModel):
    """A single cache record: key, value and creation time."""

    key: str
    value: str
    created_at: datetime

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("created_at")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Interpret naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @classmethod
    def create(cls, key: str, value: str, now: datetime) -> CacheEntry:
        """Build an entry stamped with ``now``."""
        try:
            return cls(key=key, value=value, created_at=now)
        except ValidationError as e:
            raise CacheSerializationError(
                f"Invalid cache entry for key '{key}': {e}",
                details={"key": key, "value_type": type(value).__name__},
            ) from e

    @classmethod
    def from_source(cls, source: dict[str, Any]) -> CacheEntry:
        """Parse a search hit's ``_source`` into an entry."""
        try:
            return cls.model_validate(source)
        except ValidationError as e:
            raise CacheSerializationError(
                f"Malformed cache document: {e}",
                details={"source_keys": sorted(source) if isinstance(source, dict) else None},
            ) from e

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-compatible document body."""
        return self.model_dump(mode="json")

    def age(self, now: datetime) -> timedelta:
        """Time elapsed between creation and ``now``."""
        return now - self.created_at
