"""
Elastic Cache - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is read from environment variables and validated at startup.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_INDEX = "gocache"
DEFAULT_EXPIRES_IN_SECONDS = 3600


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    PLAIN = "plain"
    JSON = "json"


class ElasticsearchConfig(BaseModel):
    """Connection settings for the Elasticsearch client."""

    hosts: list[str] = Field(
        default_factory=lambda: ["http://localhost:9200"],
        min_length=1,
        description="Elasticsearch node URLs",
    )
    api_key: str | None = Field(default=None, description="API key (takes precedence over basic auth)")
    username: str | None = Field(default=None, description="Basic auth username")
    password: str | None = Field(default=None, description="Basic auth password")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    request_timeout: float = Field(default=10.0, gt=0, description="Per-request timeout in seconds")
    max_retries: int = Field(default=3, ge=0, description="Transport-level retry attempts")

    @field_validator("hosts")
    @classmethod
    def validate_hosts(cls, v: list[str]) -> list[str]:
        """Strip whitespace and drop empty host entries."""
        hosts = [h.strip() for h in v if h and h.strip()]
        if not hosts:
            raise ValueError("At least one Elasticsearch host is required")
        return hosts

    @field_validator("password")
    @classmethod
    def validate_basic_auth(cls, v: str | None, info: Any) -> str | None:
        """Ensure username and password are supplied together."""
        username = info.data.get("username")
        if bool(username) != bool(v):
            raise ValueError("username and password must be provided together")
        return v


class CacheConfig(BaseModel):
    """Cache adapter configuration."""

    index: str = Field(default=DEFAULT_INDEX, description="Index holding the cache documents")
    expires_in_seconds: float = Field(
        default=DEFAULT_EXPIRES_IN_SECONDS,
        gt=0,
        description="Age after which an entry is considered stale",
    )
    elasticsearch: ElasticsearchConfig = Field(default_factory=ElasticsearchConfig)

    @field_validator("index")
    @classmethod
    def validate_index(cls, v: str) -> str:
        """Fall back to the default index name when blank."""
        v = v.strip()
        return v or DEFAULT_INDEX


class ElasticCacheConfig(BaseModel):
    """Root configuration for Elastic Cache."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.PLAIN, description="Log output format")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
