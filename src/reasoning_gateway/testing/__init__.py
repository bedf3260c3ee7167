"""Test helpers for reasoning-gateway and dialect plugins.

Dialect plugin packages can subclass DialectContractTest to check their
dialect against the behaviour ProviderAdapter relies on.

Usage in plugin package:
    from reasoning_gateway.testing import DialectContractTest

    class TestMyVendorContract(DialectContractTest):
        @pytest.fixture
        def dialect(self):
            return MyVendorDialect()

        @pytest.fixture
        def valid_response_body(self):
            return b'{"output": "hello"}'
"""

from .dialect import DialectContractTest
from .telemetry import RecordingTelemetrySink
from .transport import ScriptedTransport, chat_completion_body, hang

__all__ = [
    'DialectContractTest',
    'RecordingTelemetrySink',
    'ScriptedTransport',
    'chat_completion_body',
    'hang',
]
