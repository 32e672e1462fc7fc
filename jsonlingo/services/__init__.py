"""Services - the stateful parts of the pipeline: cache, rate limiting, orchestration."""

from jsonlingo.services.cache import TranslationCache, make_cache_key
from jsonlingo.services.rate_limiter import RateLimiter
from jsonlingo.services.orchestrator import (
    SessionLease,
    TranslationOrchestrator,
    create_orchestrator,
)

__all__ = [
    "TranslationCache",
    "make_cache_key",
    "RateLimiter",
    "SessionLease",
    "TranslationOrchestrator",
    "create_orchestrator",
]
