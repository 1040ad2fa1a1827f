"""
Cache Facade

Failure-tolerant access surface over a cache backend. Each operation is
routed through an optional, injected circuit breaker and wrapped with a fallback:
backend errors are logged and replaced by a default (None, an empty set,
or nothing). Errors never propagate to the caller, and there is no retry.

A default result cannot be told apart from "key absent"; operators
detect backend degradation from the ERROR log records.
"""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import (
    Any,
    Awaitable,
    Callable,
    Optional,
    Protocol,
    Set,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import TypeAdapter, ValidationError

from ...constants import (
    REDIS_DELETE_COMMAND,
    REDIS_GET_COMMAND,
    REDIS_GET_FROM_DB,
    REDIS_KEYS_COMMAND,
    REDIS_PUT_IN_DB,
    REDIS_SET_COMMAND,
)
from ...core.config import Settings, get_settings
from ...domain.cache.value_objects import (
    TTL,
    CacheKey,
    HashField,
    StructuredValue,
    TextValue,
    as_cache_value,
)
from ...infrastructure.redis.backend import CacheBackend
from ...infrastructure.redis.connection_factory import RedisConnectionFactory
from ...infrastructure.redis.exceptions import CacheTypeMismatchError
from .fallback import with_fallback

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

KeyLike = Union[str, CacheKey]
TTLLike = Union[None, int, float, timedelta, TTL]


class CircuitBreaker(Protocol):
    """
    What the facade needs from a circuit breaker.

    ``call`` awaits ``func()`` while the circuit is closed. An open circuit
    raises instead of calling; whatever it raises takes the fallback path.
    """

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        ...


@lru_cache(maxsize=256)
def _type_adapter(expected_type: Any) -> TypeAdapter:
    return TypeAdapter(Any if expected_type is object else expected_type)


def _convert(key: str, payload: Optional[str], expected_type: Any) -> Any:
    """
    Decode a stored JSON document into the caller's type.

    Validation is strict: "30" does not become 30. A payload that is not
    JSON or does not fit ``expected_type`` is a caller error.
    """
    if payload is None:
        return None
    try:
        return _type_adapter(expected_type).validate_json(payload, strict=True)
    except ValidationError as e:
        raise CacheTypeMismatchError(key, expected_type, original_error=e)


class CacheFacade:
    """
    Typed get/set/delete/hash/pattern-scan over an injected backend.

    The backend handle (and breaker, if any) is supplied by the hosting
    process and is never closed here. The facade keeps no other state.
    """

    def __init__(self, backend: CacheBackend, breaker: Optional[CircuitBreaker] = None):
        self._backend = backend
        self._breaker = breaker

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    async def _invoke(self, call: Callable[[], Awaitable[T]]) -> T:
        if self._breaker is None:
            return await call()
        return await self._breaker.call(call)

    async def _guarded(
        self,
        operation: str,
        attributes: dict,
        call: Callable[[], Awaitable[T]],
        fallback: Callable[[Exception], T],
    ) -> T:
        with tracer.start_as_current_span(f"cache.{operation}") as span:
            span.set_attribute("cache.operation", operation)
            for name, value in attributes.items():
                span.set_attribute(f"cache.{name}", str(value))

            def on_failure(error: Exception) -> T:
                span.record_exception(error)
                span.set_status(Status(StatusCode.ERROR, str(error)))
                return fallback(error)

            return await with_fallback(lambda: self._invoke(call), on_failure)

    async def set(self, key: KeyLike, value: Any, ttl: TTLLike = None) -> None:
        """
        Write a value, with optional expiration applied in the same command.

        Args:
            key: Non-empty cache key
            value: TextValue, StructuredValue, or a raw value
                (str means text, anything else means structured)
            ttl: Seconds, timedelta or TTL; None means no expiration
        """
        cache_key = CacheKey.of(key).value
        tagged = as_cache_value(value)
        expiry = TTL.coerce(ttl)

        logger.debug(
            f"Set Called for Key:{cache_key}",
            extra={
                "operation": REDIS_SET_COMMAND,
                "key": cache_key,
                "ttl": expiry.seconds if expiry else None,
            },
        )

        if isinstance(tagged, TextValue):
            call = lambda: self._backend.set_string(cache_key, tagged.text, expiry)
            element = tagged.text
        else:
            call = lambda: self._backend.set_structured(cache_key, tagged.value, expiry)
            element = tagged.value

        def fallback(error: Exception) -> None:
            logger.error(
                f"Redis SET Failed for key:{cache_key}, element:{element}",
                extra={
                    "operation": REDIS_SET_COMMAND,
                    "key": cache_key,
                    "value": element,
                    "error_type": type(error).__name__,
                },
            )

        await self._guarded(REDIS_SET_COMMAND, {"key": cache_key}, call, fallback)

    async def get(self, key: KeyLike, expected_type: Type[T]) -> Optional[T]:
        """
        Read a value as ``expected_type``.

        ``str`` reads the text path; any other type reads the structured
        path and is validated into that type.

        Returns:
            The value, or None when absent or when the backend failed

        Raises:
            CacheTypeMismatchError: If stored data does not fit expected_type
        """
        cache_key = CacheKey.of(key).value
        type_name = getattr(expected_type, "__name__", str(expected_type))

        logger.debug(
            f"Get Called for Key:{cache_key}, ResponseType:{type_name}",
            extra={"operation": REDIS_GET_COMMAND, "key": cache_key},
        )

        def fallback(error: Exception) -> None:
            logger.error(
                f"Redis Get Failed for key:{cache_key}, type:{type_name}, returning NULL",
                extra={
                    "operation": REDIS_GET_COMMAND,
                    "key": cache_key,
                    "expected_type": type_name,
                    "error_type": type(error).__name__,
                },
            )
            return None

        if expected_type is str:
            return await self._guarded(
                REDIS_GET_COMMAND,
                {"key": cache_key},
                lambda: self._backend.get_string(cache_key),
                fallback,
            )

        payload = await self._guarded(
            REDIS_GET_COMMAND,
            {"key": cache_key},
            lambda: self._backend.get_structured(cache_key),
            fallback,
        )
        return _convert(cache_key, payload, expected_type)

    async def delete(self, key: KeyLike) -> None:
        """Remove an entry. Deleting an absent key is a no-op."""
        cache_key = CacheKey.of(key).value

        def fallback(error: Exception) -> None:
            logger.error(
                f"Redis Delete Failed for key:{cache_key}",
                extra={
                    "operation": REDIS_DELETE_COMMAND,
                    "key": cache_key,
                    "error_type": type(error).__name__,
                },
            )

        await self._guarded(
            REDIS_DELETE_COMMAND,
            {"key": cache_key},
            lambda: self._backend.delete(cache_key),
            fallback,
        )

    async def hash_put(
        self, key: KeyLike, field: Optional[HashField], value: Any
    ) -> None:
        """Store ``value`` under ``field`` of a hash. Skipped when field or value is None."""
        if field is None or value is None:
            return

        cache_key = CacheKey.of(key).value
        if isinstance(value, TextValue):
            value = value.text
        elif isinstance(value, StructuredValue):
            value = value.value

        def fallback(error: Exception) -> None:
            logger.error(
                f"Redis Put Using HashOps Failed for key:{cache_key}, "
                f"hashKey:{field}, hashValue:{value}",
                extra={
                    "operation": REDIS_PUT_IN_DB,
                    "key": cache_key,
                    "field": field,
                    "value": value,
                    "error_type": type(error).__name__,
                },
            )

        await self._guarded(
            REDIS_PUT_IN_DB,
            {"key": cache_key, "field": field},
            lambda: self._backend.hash_put(cache_key, field, value),
            fallback,
        )

    async def hash_get(
        self, key: KeyLike, field: Optional[HashField], expected_type: Type[T]
    ) -> Optional[T]:
        """
        Read one field of a hash as ``expected_type``.

        Returns None without touching the backend when field is None.

        Raises:
            CacheTypeMismatchError: If stored data does not fit expected_type
        """
        if field is None:
            return None

        cache_key = CacheKey.of(key).value
        type_name = getattr(expected_type, "__name__", str(expected_type))

        def fallback(error: Exception) -> None:
            logger.error(
                f"Redis Get Using HashOps Failed for key:{cache_key}, hashKey:{field} "
                f"return type:{type_name} returning NULL",
                extra={
                    "operation": REDIS_GET_FROM_DB,
                    "key": cache_key,
                    "field": field,
                    "expected_type": type_name,
                    "error_type": type(error).__name__,
                },
            )
            return None

        payload = await self._guarded(
            REDIS_GET_FROM_DB,
            {"key": cache_key, "field": field},
            lambda: self._backend.hash_get(cache_key, field),
            fallback,
        )
        return _convert(cache_key, payload, expected_type)

    async def keys_matching(self, pattern: str) -> Set[str]:
        """
        Keys whose names match a glob-style pattern.

        Cost grows with the keyspace; keep patterns narrow.
        Returns an empty set when the backend fails.
        """

        def fallback(error: Exception) -> Set[str]:
            logger.error(
                f"Fallback for get keys from pattern executed, returning empty set, "
                f"pattern:{pattern}",
                extra={
                    "operation": REDIS_KEYS_COMMAND,
                    "key": pattern,
                    "pattern": pattern,
                    "error_type": type(error).__name__,
                },
            )
            return set()

        keys = await self._guarded(
            REDIS_KEYS_COMMAND,
            {"pattern": pattern},
            lambda: self._backend.keys_matching(pattern),
            fallback,
        )
        return set(keys)


def build_cache_facade(
    settings: Optional[Settings] = None, breaker: Optional[CircuitBreaker] = None
) -> Tuple[CacheFacade, RedisConnectionFactory]:
    """
    Wire a facade over a Redis backend built from settings.

    The breaker, if any, is supplied by the host. The caller owns the
    returned factory and must ``await factory.close()`` at shutdown.
    """
    factory = RedisConnectionFactory(settings or get_settings())
    return CacheFacade(factory.create_backend(), breaker), factory
