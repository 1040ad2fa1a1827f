"""
Redis Infrastructure Module

Connection topology selection, the cache backend over redis.asyncio
and the exception taxonomy.

This module provides:
- RedisCacheBackend: CacheBackend implementation over a redis.asyncio client
- RedisConnectionFactory: standalone/cluster/sentinel client construction
- Exception hierarchy rooted at RedisException
"""

from .backend import CacheBackend, RedisCacheBackend, serialize
from .connection_factory import (
    RedisConnectionFactory,
    PoolConfig,
    Topology,
    parse_nodes,
)
from .exceptions import (
    RedisException,
    RedisBackendUnavailableException,
    RedisConnectionException,
    RedisAuthenticationException,
    RedisOperationTimeoutException,
    RedisConfigurationException,
    CacheTypeMismatchError,
)

__all__ = [
    # Backend
    "CacheBackend",
    "RedisCacheBackend",
    "serialize",
    # Connection management
    "RedisConnectionFactory",
    "PoolConfig",
    "Topology",
    "parse_nodes",
    # Exceptions
    "RedisException",
    "RedisBackendUnavailableException",
    "RedisConnectionException",
    "RedisAuthenticationException",
    "RedisOperationTimeoutException",
    "RedisConfigurationException",
    "CacheTypeMismatchError",
]
