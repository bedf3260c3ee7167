"""Provider package - resilient adapters for remote reasoning providers

Usage:
    from reasoning_gateway.providers import get_registry
    adapter = get_registry().get("solara")
    result = await adapter.call(CallRequest(prompt="..."))

External plugins can add wire dialects by defining entry points:
    [project.entry-points."reasoning_gateway.dialects"]
    my_vendor = "my_package.dialect:MyVendorDialect"
"""

from . import plugin_loader
from .adapter import ProviderAdapter
from .base import ProviderDialect
from .registry import ProviderRegistry, get_registry, reset_registry
from .transport import HttpxTransport, HttpxTransportConfig, Transport, TransportResponse

__all__ = [
    # Core
    'ProviderAdapter',
    'ProviderRegistry',
    'get_registry',
    'reset_registry',
    # Dialects
    'ProviderDialect',
    'plugin_loader',
    # Transport
    'Transport',
    'TransportResponse',
    'HttpxTransport',
    'HttpxTransportConfig',
]
