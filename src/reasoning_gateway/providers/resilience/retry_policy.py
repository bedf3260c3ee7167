"""Retry eligibility and exponential backoff."""

import random

from reasoning_gateway.types import FailureLabel

DEFAULT_MAX_INTERVAL = 30.0


class RetryPolicy:
    """Decides whether a failed attempt is retried and how long to wait.

    Attempts are 0-indexed and ``max_retries`` is the total number of
    attempts, so the last allowed attempt is ``max_retries - 1``.

    Backoff doubles per attempt (``base * 2 ** attempt_index``) and is
    capped at ``max_interval`` seconds. With a non-zero ``jitter`` the delay
    is scaled by a random factor in ``[1 - jitter, 1 + jitter]``.
    """

    def __init__(self, max_interval: float = DEFAULT_MAX_INTERVAL, jitter: float = 0.0):
        if max_interval <= 0:
            raise ValueError(f"max_interval must be > 0, got {max_interval}")
        if not 0.0 <= jitter <= 1.0:
            raise ValueError(f"jitter must be within [0, 1], got {jitter}")

        self.max_interval = max_interval
        self.jitter = jitter

    def should_retry(self, label: FailureLabel, attempt_index: int, max_retries: int) -> bool:
        """Check if another attempt should follow a failure."""
        if not label.retryable:
            return False
        return attempt_index < max_retries - 1

    def backoff_duration(self, attempt_index: int, base_interval: float) -> float:
        """Get the delay in seconds before the attempt after ``attempt_index``."""
        delay = min(base_interval * (2 ** attempt_index), self.max_interval)
        if self.jitter:
            delay *= random.uniform(1.0 - self.jitter, 1.0 + self.jitter)
            delay = min(max(0.0, delay), self.max_interval)
        return delay

    def __repr__(self) -> str:
        return f"RetryPolicy(max_interval={self.max_interval}, jitter={self.jitter})"
