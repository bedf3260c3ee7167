"""HTTP transport for provider calls.

A transport performs exactly one HTTP request; retries, classification and
cancellation live in ProviderAdapter. The default implementation wraps a
pooled ``httpx.AsyncClient`` so concurrent calls to the same provider share
connections.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from reasoning_gateway.errors import TransportError, TransportTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Raw outcome of one HTTP call."""

    status_code: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


@runtime_checkable
class Transport(Protocol):
    """Single-request HTTP boundary."""

    async def send(
        self,
        endpoint: str,
        headers: dict[str, str],
        body: bytes,
        deadline: float,
    ) -> TransportResponse:
        """POST ``body`` to ``endpoint`` within ``deadline`` seconds.

        Raises:
            TransportTimeout: If the deadline was exceeded
            TransportError: On any other network failure
        """
        ...

    async def aclose(self) -> None:
        ...


@dataclass
class HttpxTransportConfig:
    """Connection pool and socket timeout settings."""

    connect_timeout: float = 10.0
    write_timeout: float = 10.0
    pool_timeout: float = 5.0

    max_connections: int = 50
    max_keepalive_connections: int = 20
    keepalive_expiry: float = 30.0

    def __post_init__(self):
        """Validate configuration."""
        if self.max_connections < self.max_keepalive_connections:
            raise ValueError(
                f"max_connections ({self.max_connections}) must be >= "
                f"max_keepalive_connections ({self.max_keepalive_connections})"
            )
        for name in ("connect_timeout", "write_timeout", "pool_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")


class HttpxTransport:
    """Transport backed by one pooled ``httpx.AsyncClient``.

    The per-call deadline becomes the read timeout; connect, write and
    pool timeouts come from HttpxTransportConfig and are each capped by
    the deadline.
    """

    def __init__(
        self,
        config: HttpxTransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or HttpxTransportConfig()

        if client is None:
            client = httpx.AsyncClient(
                limits=httpx.Limits(
                    max_connections=self.config.max_connections,
                    max_keepalive_connections=self.config.max_keepalive_connections,
                    keepalive_expiry=self.config.keepalive_expiry
                ),
                follow_redirects=True
            )
        self._client = client

        logger.debug(
            f"Initialized HttpxTransport: "
            f"max_connections={self.config.max_connections}, "
            f"connect_timeout={self.config.connect_timeout}s"
        )

    async def send(
        self,
        endpoint: str,
        headers: dict[str, str],
        body: bytes,
        deadline: float,
    ) -> TransportResponse:
        try:
            response = await self._client.post(
                endpoint,
                content=body,
                headers=headers,
                timeout=self._build_timeout(deadline)
            )
        except httpx.TimeoutException as e:
            raise TransportTimeout(f"POST {endpoint} timed out after {deadline:.1f}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"POST {endpoint} failed: {type(e).__name__}: {e}") from e

        return TransportResponse(status_code=response.status_code, body=response.content)

    def _build_timeout(self, deadline: float) -> httpx.Timeout:
        """Build httpx.Timeout bounded by the attempt deadline."""
        return httpx.Timeout(
            connect=min(self.config.connect_timeout, deadline),
            read=deadline,
            write=min(self.config.write_timeout, deadline),
            pool=min(self.config.pool_timeout, deadline)
        )

    async def aclose(self) -> None:
        """Close the underlying async client."""
        await self._client.aclose()
        logger.debug("Closed HttpxTransport client")
