"""
Main pytest configuration for all tests.

Fixtures and utilities for unit tests of the cache facade and the
Redis infrastructure. No live Redis server is required.
"""

import fnmatch
import os
from typing import Any, Dict, List, Optional, Set, Tuple
from unittest.mock import AsyncMock

import pytest

# Set test environment variables before importing package modules
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"

from redis_facade.domain.cache.value_objects import TTL
from redis_facade.infrastructure.redis.backend import RedisCacheBackend, serialize
from redis_facade.infrastructure.redis.exceptions import RedisConnectionException
from redis_facade.services.cache.cache_facade import CacheFacade

BACKEND_METHODS = (
    "set_string",
    "set_structured",
    "get_string",
    "get_structured",
    "delete",
    "hash_put",
    "hash_get",
    "keys_matching",
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryCacheBackend:
    """
    CacheBackend kept in dictionaries, with expiry driven by a clock.

    Values are stored in their serialized form so round-trips go through
    the same JSON encoding as the Redis backend.
    """

    def __init__(self, clock: Optional[FakeClock] = None):
        self._clock = clock or FakeClock()
        self._values: Dict[str, Tuple[str, Optional[float]]] = {}
        self._hashes: Dict[str, Dict[str, str]] = {}
        self.calls: List[str] = []

    def _live(self, key: str) -> Optional[str]:
        entry = self._values.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._values[key]
            return None
        return payload

    def _write(self, key: str, payload: str, ttl: Optional[TTL]) -> None:
        if ttl is None:
            self._values[key] = (payload, None)
        elif ttl.is_expired:
            self._values.pop(key, None)
        else:
            self._values[key] = (payload, self._clock() + ttl.seconds)

    async def set_string(self, key: str, text: str, ttl: Optional[TTL] = None) -> None:
        self.calls.append("set_string")
        self._write(key, text, ttl)

    async def set_structured(self, key: str, value: Any, ttl: Optional[TTL] = None) -> None:
        self.calls.append("set_structured")
        self._write(key, serialize(value), ttl)

    async def get_string(self, key: str) -> Optional[str]:
        self.calls.append("get_string")
        return self._live(key)

    async def get_structured(self, key: str) -> Optional[str]:
        self.calls.append("get_structured")
        return self._live(key)

    async def delete(self, key: str) -> None:
        self.calls.append("delete")
        self._values.pop(key, None)
        self._hashes.pop(key, None)

    async def hash_put(self, key: str, field: str, value: Any) -> None:
        self.calls.append("hash_put")
        self._hashes.setdefault(key, {})[field] = serialize(value)

    async def hash_get(self, key: str, field: str) -> Optional[str]:
        self.calls.append("hash_get")
        return self._hashes.get(key, {}).get(field)

    async def keys_matching(self, pattern: str) -> Set[str]:
        self.calls.append("keys_matching")
        names = [key for key in list(self._values) if self._live(key) is not None]
        names.extend(self._hashes)
        return {name for name in names if fnmatch.fnmatchcase(name, pattern)}


@pytest.fixture
def clock():
    """Controllable clock for expiry tests."""
    return FakeClock()


@pytest.fixture
def memory_backend(clock):
    """In-memory backend sharing the test clock."""
    return InMemoryCacheBackend(clock)


@pytest.fixture
def facade(memory_backend):
    """Facade over the in-memory backend, without a breaker."""
    return CacheFacade(memory_backend)


@pytest.fixture
def mock_backend():
    """Backend mock whose methods are AsyncMocks."""
    return AsyncMock(spec=RedisCacheBackend)


@pytest.fixture
def failing_backend():
    """Backend mock where every operation raises a connection error."""
    backend = AsyncMock(spec=RedisCacheBackend)
    for name in BACKEND_METHODS:
        getattr(backend, name).side_effect = RedisConnectionException(
            "Error 111 connecting to localhost:6379. Connection refused."
        )
    return backend


# Test markers and configuration
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "redis: marks tests as Redis-related")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        if "redis" in item.nodeid:
            item.add_marker(pytest.mark.redis)
        if "unit" in item.nodeid:
            item.add_marker(pytest.mark.unit)
