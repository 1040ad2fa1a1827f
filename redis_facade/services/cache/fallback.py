"""
Fallback combinators.

Run an async operation and substitute a fallback result when it raises.
Cancellation is never intercepted.
"""

from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


async def with_fallback(
    operation: Callable[[], Awaitable[T]],
    fallback: Callable[[Exception], T],
) -> T:
    """
    Await ``operation()``; on any exception return ``fallback(error)``.

    Args:
        operation: Zero-argument callable returning an awaitable
        fallback: Receives the exception and returns the substitute result

    Returns:
        The operation result, or the fallback result on failure
    """
    try:
        return await operation()
    except Exception as e:
        return fallback(e)


def fallback_to(fallback: Callable[..., Any]):
    """
    Decorator form of ``with_fallback`` for coroutine functions.

    The fallback is called with the exception followed by the
    arguments of the failed call.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await with_fallback(
                lambda: func(*args, **kwargs),
                lambda error: fallback(error, *args, **kwargs),
            )

        return wrapper

    return decorator
