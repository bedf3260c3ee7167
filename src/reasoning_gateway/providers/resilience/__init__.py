"""Shared resilience utilities for providers.

Provides failure classification and the retry/backoff policy used by
ProviderAdapter for consistent failure handling across providers.
"""

from .classifier import classify, classify_status
from .retry_policy import DEFAULT_MAX_INTERVAL, RetryPolicy

__all__ = [
    "classify",
    "classify_status",
    "RetryPolicy",
    "DEFAULT_MAX_INTERVAL",
]
