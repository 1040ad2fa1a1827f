"""
Redis Infrastructure Exceptions

Domain-specific exceptions for Redis operations.
Backend failures are rooted at RedisBackendUnavailableException and are
converted to fallback values at the facade boundary. Configuration and
type errors propagate to the caller.
"""

from typing import Optional, Any, Dict


class RedisException(Exception):
    """Base exception for Redis-related errors.

    Carries a stable error code and structured details for log records.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class RedisBackendUnavailableException(RedisException):
    """Any failure surfaced by the cache backend, whatever the cause."""

    def __init__(
        self,
        message: str = "Redis backend unavailable",
        error_code: str = "REDIS_BACKEND_UNAVAILABLE",
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        details = dict(details or {})
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(message=message, error_code=error_code, details=details)
        # Preserve exception context for debugging (exception chaining)
        if original_error:
            self.__cause__ = original_error


class RedisConnectionException(RedisBackendUnavailableException):
    """Raised when Redis connection fails or is lost."""

    def __init__(
        self,
        message: str = "Redis connection failed",
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code="REDIS_CONNECTION_ERROR",
            original_error=original_error,
        )


class RedisAuthenticationException(RedisBackendUnavailableException):
    """Raised when Redis authentication fails."""

    def __init__(
        self,
        message: str = "Redis authentication failed",
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            error_code="REDIS_AUTH_ERROR",
            original_error=original_error,
        )


class RedisOperationTimeoutException(RedisBackendUnavailableException):
    """Raised when Redis operation times out."""

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {"operation": operation}
        if key:
            details["key"] = key

        super().__init__(
            message=f"Redis operation '{operation}' timed out",
            error_code="REDIS_TIMEOUT_ERROR",
            details=details,
            original_error=original_error,
        )


class RedisConfigurationException(RedisException):
    """Raised when Redis configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="REDIS_CONFIGURATION_ERROR", details=details
        )
        if original_error:
            self.__cause__ = original_error


class CacheTypeMismatchError(TypeError):
    """Stored data cannot be converted to the type the caller asked for."""

    def __init__(self, key: str, expected_type: Any, original_error: Optional[Exception] = None):
        self.key = key
        self.expected_type = expected_type
        type_name = getattr(expected_type, "__name__", repr(expected_type))
        super().__init__(f"Value for key {key!r} is not a valid {type_name}")
        if original_error:
            self.__cause__ = original_error
