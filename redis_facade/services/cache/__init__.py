"""Cache facade service and fallback combinators."""

from .cache_facade import CacheFacade, CircuitBreaker, build_cache_facade
from .fallback import fallback_to, with_fallback

__all__ = [
    "CacheFacade",
    "CircuitBreaker",
    "build_cache_facade",
    "fallback_to",
    "with_fallback",
]
