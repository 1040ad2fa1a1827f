"""
Cache Value Objects

Immutable value objects for the cache domain.
Keys, TTLs and the tagged value variants that select a serialization path.
"""

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Union


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Keys are opaque to the facade; any non-empty string is accepted.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate cache key."""
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("Cache key cannot be empty")

    @classmethod
    def of(cls, key: Union[str, "CacheKey"]) -> "CacheKey":
        """Normalize a raw string or an existing key."""
        if isinstance(key, CacheKey):
            return key
        return cls(key)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TTL:
    """
    Time To Live value object for cache expiration.

    Whole seconds, zero allowed. Zero means the entry is already expired.
    """

    seconds: int

    def __post_init__(self) -> None:
        """Validate TTL value."""
        if self.seconds < 0:
            raise ValueError("TTL cannot be negative")

    @classmethod
    def from_seconds(cls, seconds: Union[int, float]) -> "TTL":
        """Create TTL from seconds, rounding fractions up."""
        return cls(int(math.ceil(seconds)))

    @classmethod
    def coerce(
        cls, ttl: Union[None, int, float, timedelta, "TTL"]
    ) -> Optional["TTL"]:
        """Normalize the accepted TTL spellings. None means no expiration."""
        if ttl is None or isinstance(ttl, TTL):
            return ttl
        if isinstance(ttl, timedelta):
            return cls.from_seconds(ttl.total_seconds())
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
            raise TypeError(f"Unsupported TTL type: {type(ttl).__name__}")
        return cls.from_seconds(ttl)

    @property
    def is_expired(self) -> bool:
        return self.seconds == 0


@dataclass(frozen=True)
class TextValue:
    """Plain text, written as-is without structured serialization."""

    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise TypeError("TextValue requires a str")


@dataclass(frozen=True)
class StructuredValue:
    """Any JSON-serializable value, written through the structured path."""

    value: Any


CacheValue = Union[TextValue, StructuredValue]


def as_cache_value(value: Any) -> CacheValue:
    """
    Tag a raw value at the API edge.

    Already-tagged values pass through. A bare ``str`` is shorthand for
    ``TextValue``; anything else is shorthand for ``StructuredValue``.
    """
    if isinstance(value, (TextValue, StructuredValue)):
        return value
    if isinstance(value, str):
        return TextValue(value)
    return StructuredValue(value)


# A field inside a hash-valued cache entry
HashField = str
