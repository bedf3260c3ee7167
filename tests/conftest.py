"""Pytest fixtures and configuration for reasoning-gateway tests"""

import pytest

from reasoning_gateway.config import ProviderConfig
from reasoning_gateway.providers import ProviderAdapter, plugin_loader, reset_registry
from reasoning_gateway.testing import RecordingTelemetrySink, ScriptedTransport


@pytest.fixture(autouse=True)
def reset_global_state():
    """Keep dialect cache and process-wide registry isolated between tests"""
    plugin_loader.reset()
    reset_registry()
    yield
    plugin_loader.reset()
    reset_registry()


@pytest.fixture
def provider_config():
    """Fast-retrying provider config (1ms base backoff)"""
    return ProviderConfig(
        provider_id="solara",
        credential="sk-test-secret-value",
        model="deepseek-r1",
        base_url="https://api.example.com/v1",
        timeout_ms=1000,
        max_retries=3,
        base_backoff_ms=1,
        max_backoff_ms=10,
    )


@pytest.fixture
def sink():
    return RecordingTelemetrySink()


@pytest.fixture
def make_adapter(provider_config, sink):
    """Build an adapter around a ScriptedTransport"""
    def factory(steps, config=None, **kwargs):
        transport = ScriptedTransport(steps)
        adapter = ProviderAdapter(
            config or provider_config,
            transport=transport,
            telemetry=kwargs.pop("telemetry", sink),
            **kwargs
        )
        return adapter, transport
    return factory
