"""
Elastic Cache - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import DEFAULT_EXPIRES_IN_SECONDS, DEFAULT_INDEX, ElasticCacheConfig

logger = logging.getLogger(__name__)

_config_instance: ElasticCacheConfig | None = None


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


def _build_config_dict() -> dict[str, Any]:
    """Collect raw configuration values from the environment."""
    return {
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "log_format": os.getenv("LOG_FORMAT", "plain").lower(),
        "cache": {
            "index": os.getenv("CACHE_INDEX", DEFAULT_INDEX),
            "expires_in_seconds": float(os.getenv("CACHE_EXPIRES_IN_SECONDS", str(DEFAULT_EXPIRES_IN_SECONDS))),
            "elasticsearch": {
                "hosts": _env_list("ELASTICSEARCH_HOSTS", "http://localhost:9200"),
                "api_key": os.getenv("ELASTICSEARCH_API_KEY") or None,
                "username": os.getenv("ELASTICSEARCH_USERNAME") or None,
                "password": os.getenv("ELASTICSEARCH_PASSWORD") or None,
                "verify_certs": _env_bool("ELASTICSEARCH_VERIFY_CERTS", "true"),
                "request_timeout": float(os.getenv("ELASTICSEARCH_REQUEST_TIMEOUT", "10.0")),
                "max_retries": int(os.getenv("ELASTICSEARCH_MAX_RETRIES", "3")),
            },
        },
    }


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> ElasticCacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in current directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated ElasticCacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    try:
        config_dict = _build_config_dict()
    except ValueError as e:
        logger.error(f"Malformed numeric environment variable: {e}", extra={"error": str(e)})
        raise ConfigurationError(
            f"Malformed numeric environment variable: {e}",
            details={"error": str(e)},
        ) from e

    try:
        _config_instance = ElasticCacheConfig(**config_dict)
        logger.info(
            f"Configuration loaded successfully (index: {_config_instance.cache.index})",
            extra={"cache_index": _config_instance.cache.index, "log_level": _config_instance.log_level},
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e


def get_config() -> ElasticCacheConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current ElasticCacheConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> ElasticCacheConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded ElasticCacheConfig instance
    """
    return load_config(env_file=env_file, reload=True)
