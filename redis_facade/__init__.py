"""
Redis Facade

Failure-tolerant cache facade over redis-py.
"""

from .constants import APP_VERSION as __version__
from .domain.cache.value_objects import TTL, CacheKey, StructuredValue, TextValue
from .infrastructure.redis import (
    CacheBackend,
    CacheTypeMismatchError,
    RedisCacheBackend,
    RedisConnectionFactory,
)
from .services.cache import CacheFacade, CircuitBreaker, build_cache_facade

__all__ = [
    "CacheFacade",
    "CircuitBreaker",
    "build_cache_facade",
    "CacheBackend",
    "RedisCacheBackend",
    "RedisConnectionFactory",
    "CacheKey",
    "TTL",
    "TextValue",
    "StructuredValue",
    "CacheTypeMismatchError",
]
