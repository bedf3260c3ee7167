"""reasoning-gateway - resilient calls to remote reasoning providers"""

from reasoning_gateway.errors import (
    CallCancelled,
    GatewayError,
    InvalidRequest,
    ProviderCallFailed,
    UnknownProvider,
)
from reasoning_gateway.types import (
    AttemptRecord,
    CallRequest,
    CallResult,
    FailureLabel,
    TelemetryEvent,
    TokenUsage,
)

__version__ = "0.1.0"

__all__ = [
    "AttemptRecord",
    "CallRequest",
    "CallResult",
    "FailureLabel",
    "TelemetryEvent",
    "TokenUsage",
    "GatewayError",
    "InvalidRequest",
    "ProviderCallFailed",
    "CallCancelled",
    "UnknownProvider",
]
