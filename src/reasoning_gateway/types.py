"""Type definitions for provider calls, attempts and telemetry."""
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class FailureLabel(str, Enum):
    """Kinds of failure an attempt can end with."""
    TIMEOUT = "Timeout"
    RATE_LIMITED = "RateLimited"
    SERVER_ERROR = "ServerError"
    CLIENT_ERROR = "ClientError"
    MALFORMED = "Malformed"

    @property
    def retryable(self) -> bool:
        return self in _RETRYABLE_LABELS


_RETRYABLE_LABELS = frozenset({
    FailureLabel.TIMEOUT,
    FailureLabel.RATE_LIMITED,
    FailureLabel.SERVER_ERROR,
})

# Outcome strings that are not failure labels
SUCCESS = "Success"
CANCELLED = "Cancelled"
EXHAUSTED_RETRIES = "ExhaustedRetries"


@dataclass(frozen=True)
class CallRequest:
    """One logical call to a reasoning provider.

    ``model`` falls back to the provider's configured model when omitted.
    The ``*_ms`` / ``max_retries`` overrides replace the provider defaults
    for this call only.
    """

    prompt: str
    model: str | None = None
    temperature: float = 0.2
    max_tokens: int = 1024
    timeout_ms: int | None = None
    max_retries: int | None = None
    base_backoff_ms: int | None = None


@dataclass(frozen=True)
class TokenUsage:
    """Token counters reported by a provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class AttemptRecord:
    """Outcome of a single request/response cycle."""

    attempt_index: int
    started_at: datetime
    outcome: str  # SUCCESS, CANCELLED or a FailureLabel value
    latency: float  # seconds
    detail: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == SUCCESS


@dataclass(frozen=True)
class CallResult:
    """Successful call result. Never produced for a failed call."""

    content: str
    usage: TokenUsage
    attempt_count: int
    elapsed: float  # seconds
    provider_id: str = ""
    model: str = ""
    attempts: tuple[AttemptRecord, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "content": self.content,
            "usage": self.usage.to_dict(),
            "attempt_count": self.attempt_count,
            "elapsed": round(self.elapsed, 3),
            "provider_id": self.provider_id,
            "model": self.model,
        }


@dataclass(frozen=True)
class TelemetryEvent:
    """Per-attempt observability record.

    Holds no prompt text and no credential.
    """

    provider_id: str
    model: str
    attempt_index: int
    outcome: str
    latency_ms: float
    usage: TokenUsage | None = None
    estimated_cost_usd: float | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "providerId": self.provider_id,
            "model": self.model,
            "attemptIndex": self.attempt_index,
            "outcome": self.outcome,
            "latencyMs": round(self.latency_ms, 1),
        }
        if self.usage is not None:
            result["usage"] = self.usage.to_dict()
        if self.estimated_cost_usd is not None:
            result["estimatedCostUsd"] = self.estimated_cost_usd
        return result
