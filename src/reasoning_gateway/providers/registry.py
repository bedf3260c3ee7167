"""Provider registry - one lazily constructed adapter per provider id.

Uses registry pattern instead of per-provider singletons: every provider id
maps to a config loader, and the first ``get()`` for an id loads the config
(reading the credential) and builds its ProviderAdapter. Later calls return
the cached instance.

Thread-safe: uses double-checked locking with one construction lock per
provider id, so concurrent first access for the same id loads the config
once and constructs exactly one adapter, while a slow config load for one
id never holds up first access to another.
"""

import functools
import logging
import threading
from collections.abc import Callable

from reasoning_gateway.config import ProviderConfig, Settings
from reasoning_gateway.errors import UnknownProvider
from reasoning_gateway.providers.adapter import ProviderAdapter
from reasoning_gateway.providers.transport import Transport
from reasoning_gateway.telemetry import LoggingTelemetrySink, TelemetrySink

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], ProviderConfig]


class ProviderRegistry:
    """Maps provider ids to cached ProviderAdapter instances."""

    def __init__(
        self,
        telemetry: TelemetrySink | None = None,
        transport_factory: Callable[[ProviderConfig], Transport] | None = None,
        adapter_factory: Callable[..., ProviderAdapter] = ProviderAdapter,
    ):
        """Initialize an empty registry.

        Args:
            telemetry: Sink handed to every adapter
            transport_factory: Builds a transport per provider (default: adapter's own)
            adapter_factory: Adapter constructor, replaceable for testing
        """
        self.telemetry = telemetry
        self._transport_factory = transport_factory
        self._adapter_factory = adapter_factory
        self._loaders: dict[str, ConfigLoader] = {}
        self._adapters: dict[str, ProviderAdapter] = {}
        self._building: set[str] = set()
        self._build_locks: dict[str, threading.Lock] = {}
        # Guards the dicts above; never held while a config loads
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        telemetry: TelemetrySink | None = None,
        transport_factory: Callable[[ProviderConfig], Transport] | None = None,
    ) -> "ProviderRegistry":
        """Build a registry with a loader for every configured provider.

        Credentials are not read here; each loader reads its provider's
        credential on first ``get()``.
        """
        registry = cls(telemetry=telemetry, transport_factory=transport_factory)
        for provider_id in settings.configured_providers():
            registry.register(provider_id, functools.partial(settings.provider_config, provider_id))
        return registry

    def register(self, provider_id: str, loader: ConfigLoader | ProviderConfig) -> None:
        """Register the configuration source for a provider id.

        Args:
            provider_id: Unique provider identifier (e.g., "solara")
            loader: Zero-argument callable returning the ProviderConfig,
                or a ProviderConfig instance

        Raises:
            ValueError: If an adapter for this id was already constructed
        """
        if isinstance(loader, ProviderConfig):
            config = loader

            def loader() -> ProviderConfig:
                return config

        with self._lock:
            if provider_id in self._adapters or provider_id in self._building:
                raise ValueError(f"Provider '{provider_id}' is already in use and cannot be re-registered")
            self._loaders[provider_id] = loader
        logger.debug(f"Registered provider configuration: {provider_id}")

    def get(self, provider_id: str) -> ProviderAdapter:
        """Get or create the adapter for a provider (thread-safe).

        Uses double-checked locking pattern:
        1. Check without lock (fast path for subsequent calls)
        2. Acquire the per-id construction lock if needed
        3. Check again to prevent race conditions

        Raises:
            UnknownProvider: If no configuration is registered for the id
        """
        # Fast path: adapter already exists
        adapter = self._adapters.get(provider_id)
        if adapter is not None:
            return adapter

        # Slow path: need to create adapter
        with self._lock:
            if provider_id not in self._loaders:
                raise UnknownProvider(provider_id, list(self._loaders))
            build_lock = self._build_locks.setdefault(provider_id, threading.Lock())

        with build_lock:
            # Double-check after acquiring lock
            adapter = self._adapters.get(provider_id)
            if adapter is not None:
                return adapter

            with self._lock:
                loader = self._loaders[provider_id]
                self._building.add(provider_id)
            try:
                logger.info(f"Creating ProviderAdapter for provider: {provider_id}")
                config = loader()
                transport = self._transport_factory(config) if self._transport_factory else None
                adapter = self._adapter_factory(config, transport=transport, telemetry=self.telemetry)
                with self._lock:
                    self._adapters[provider_id] = adapter
            finally:
                with self._lock:
                    self._building.discard(provider_id)

            logger.info(
                f"ProviderAdapter initialized for {provider_id}: "
                f"model={config.model}, timeout={config.timeout_ms}ms, "
                f"max_retries={config.max_retries}"
            )
            return adapter

    def available_providers(self) -> list[str]:
        """Get ids of all registered providers"""
        return sorted(self._loaders)

    def is_constructed(self, provider_id: str) -> bool:
        """Check if the adapter for an id has been built"""
        return provider_id in self._adapters

    async def aclose(self) -> None:
        """Close every constructed adapter and clear the cache.

        Registered loaders are kept, so adapters are rebuilt on next ``get()``.
        """
        with self._lock:
            adapters = list(self._adapters.items())
            self._adapters.clear()

        for provider_id, adapter in adapters:
            try:
                await adapter.aclose()
            except Exception as e:
                logger.warning(f"Error closing adapter for {provider_id}: {e}")
        logger.debug("ProviderRegistry closed - all adapters released")


# Process-wide registry, built lazily from global settings
_registry: ProviderRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> ProviderRegistry:
    """Get the process-wide registry, building it from settings on first use"""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                from reasoning_gateway.config import settings
                _registry = ProviderRegistry.from_settings(settings, telemetry=LoggingTelemetrySink())
    return _registry


def reset_registry() -> None:
    """Drop the process-wide registry (for testing only)

    Does not close adapters; use ``await get_registry().aclose()`` first
    when transports were opened.
    """
    global _registry
    with _registry_lock:
        _registry = None
