"""
Elastic Cache - Cache Backends

Exports available cache backend implementations.
"""

from .elasticsearch import DeleteOutcome, ElasticCacheBackend

__all__ = [
    "ElasticCacheBackend",
    "DeleteOutcome",
]
