"""Exceptions raised to callers of the gateway.

Every error carries the structured context (provider id, label, attempts)
a caller needs to log or alert without re-deriving it.
"""

from reasoning_gateway.types import AttemptRecord, FailureLabel


class GatewayError(Exception):
    """Base class for all gateway errors."""

    def __init__(self, message: str, provider_id: str | None = None):
        super().__init__(message)
        self.provider_id = provider_id


class InvalidRequest(GatewayError):
    """Request rejected before any attempt was made."""

    attempt_count = 0

    def __init__(self, message: str, provider_id: str | None = None, field: str | None = None):
        super().__init__(message, provider_id)
        self.field = field


class ProviderCallFailed(GatewayError):
    """Remote call hit a non-retryable failure or ran out of attempts.

    Attributes:
        label: FailureLabel value that stopped the call, or ``ExhaustedRetries``
        last_label: Label of the final failed attempt
        attempts: Every AttemptRecord of the call, in order
    """

    def __init__(
        self,
        provider_id: str,
        label: str,
        last_label: FailureLabel,
        attempts: tuple[AttemptRecord, ...],
    ):
        self.label = label
        self.last_label = last_label
        self.attempts = attempts
        super().__init__(
            f"{provider_id} call failed ({label}) after {len(attempts)} "
            f"attempt{'s' if len(attempts) != 1 else ''}; last failure: {last_label.value}",
            provider_id,
        )

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)


class CallCancelled(GatewayError):
    """External cancellation signal fired mid-call.

    ``attempts`` holds every attempt started before the signal, including a
    final record with outcome ``Cancelled`` when an in-flight attempt was
    aborted.
    """

    def __init__(self, provider_id: str, attempts: tuple[AttemptRecord, ...] = ()):
        self.attempts = attempts
        super().__init__(
            f"{provider_id} call cancelled after {len(attempts)} attempts",
            provider_id,
        )

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)


class UnknownProvider(GatewayError):
    """No configuration registered for the requested provider id."""

    def __init__(self, provider_id: str, available: list[str] | None = None):
        self.available = sorted(available or [])
        super().__init__(
            f"Unknown provider: {provider_id}. "
            f"Available: {', '.join(self.available) or 'none (check configuration)'}",
            provider_id,
        )


class TransportError(Exception):
    """Network-level failure of a single HTTP call."""


class TransportTimeout(TransportError):
    """Single HTTP call exceeded its deadline."""


class MalformedResponse(Exception):
    """Successful HTTP status but the body lacks the expected content."""
