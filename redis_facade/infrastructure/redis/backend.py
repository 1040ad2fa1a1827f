"""
Redis Cache Backend

The CacheBackend protocol is the only boundary the cache facade talks to.
RedisCacheBackend implements it over a redis.asyncio client (standalone,
sentinel-managed or cluster) created with ``decode_responses=True``.

Text values are stored verbatim. Structured values and hash values are
stored as JSON; structured reads hand the JSON document back undecoded so
the caller decodes it straight into the type it expects.

redis-py errors are re-raised as RedisBackendUnavailableException
subclasses, with the redis-py error kept as ``__cause__``.
"""

import dataclasses
import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol, Set, Union

from pydantic import BaseModel
from redis.asyncio import Redis
from redis.asyncio.cluster import RedisCluster
from redis.exceptions import (
    AuthenticationError as RedisAuthError,
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from ...domain.cache.value_objects import TTL
from .exceptions import (
    RedisAuthenticationException,
    RedisBackendUnavailableException,
    RedisConnectionException,
    RedisOperationTimeoutException,
)

logger = logging.getLogger(__name__)

RedisClient = Union[Redis, RedisCluster]


class CacheBackend(Protocol):
    """Key-value/hash store operations consumed by the cache facade.

    Every method may raise; the facade owns the failure policy.
    ``get_structured`` and ``hash_get`` return the stored JSON document,
    or None when absent.
    """

    async def set_string(self, key: str, text: str, ttl: Optional[TTL] = None) -> None:
        ...

    async def set_structured(self, key: str, value: Any, ttl: Optional[TTL] = None) -> None:
        ...

    async def get_string(self, key: str) -> Optional[str]:
        ...

    async def get_structured(self, key: str) -> Optional[str]:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def hash_put(self, key: str, field: str, value: Any) -> None:
        ...

    async def hash_get(self, key: str, field: str) -> Optional[str]:
        ...

    async def keys_matching(self, pattern: str) -> Set[str]:
        ...


def _json_default(value: Any) -> Any:
    """Fallback encoder for values the json module cannot handle."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    return str(value)


def serialize(value: Any) -> str:
    """Encode a structured value as JSON."""
    return json.dumps(value, default=_json_default, separators=(",", ":"))


@contextmanager
def _backend_errors(operation: str, key: str) -> Iterator[None]:
    """Re-raise redis-py failures as backend-unavailable errors."""
    try:
        yield
    # AuthenticationError subclasses ConnectionError, so it goes first
    except RedisAuthError as e:
        raise RedisAuthenticationException(
            message=f"Redis authentication failed during {operation}",
            original_error=e,
        )
    except RedisConnectionError as e:
        raise RedisConnectionException(
            message=f"Redis connection failed during {operation}: {e}",
            original_error=e,
        )
    except RedisTimeoutError as e:
        raise RedisOperationTimeoutException(operation, key=key, original_error=e)
    except RedisError as e:
        raise RedisBackendUnavailableException(
            message=f"Redis {operation} failed: {e}",
            details={"operation": operation, "key": key},
            original_error=e,
        )


class RedisCacheBackend:
    """
    CacheBackend over redis-py's asyncio client.

    The client (and its pool) is owned by whoever created it; this class
    never closes it.
    """

    def __init__(self, client: RedisClient, scan_count: int = 500):
        self._redis = client
        self._scan_count = scan_count

    @property
    def client(self) -> RedisClient:
        return self._redis

    async def _write(self, key: str, payload: str, ttl: Optional[TTL]) -> None:
        with _backend_errors("SET", key):
            if ttl is None:
                await self._redis.set(key, payload)
            elif ttl.is_expired:
                # An entry that expires immediately is indistinguishable from no entry
                await self._redis.delete(key)
            else:
                # SET with EX applies value and expiry in one command
                await self._redis.set(key, payload, ex=ttl.seconds)

    async def set_string(self, key: str, text: str, ttl: Optional[TTL] = None) -> None:
        await self._write(key, text, ttl)

    async def set_structured(self, key: str, value: Any, ttl: Optional[TTL] = None) -> None:
        await self._write(key, serialize(value), ttl)

    async def get_string(self, key: str) -> Optional[str]:
        with _backend_errors("GET", key):
            return await self._redis.get(key)

    async def get_structured(self, key: str) -> Optional[str]:
        with _backend_errors("GET", key):
            return await self._redis.get(key)

    async def delete(self, key: str) -> None:
        with _backend_errors("DEL", key):
            await self._redis.delete(key)

    async def hash_put(self, key: str, field: str, value: Any) -> None:
        payload = serialize(value)
        with _backend_errors("HSET", key):
            await self._redis.hset(key, field, payload)

    async def hash_get(self, key: str, field: str) -> Optional[str]:
        with _backend_errors("HGET", key):
            return await self._redis.hget(key, field)

    async def keys_matching(self, pattern: str) -> Set[str]:
        """Collect matching keys with incremental SCAN instead of KEYS."""
        keys: Set[str] = set()
        with _backend_errors("SCAN", pattern):
            async for key in self._redis.scan_iter(match=pattern, count=self._scan_count):
                keys.add(key)
        return keys
