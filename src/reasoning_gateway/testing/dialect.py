"""Dialect contract tests."""

from abc import ABC, abstractmethod

import pytest

from reasoning_gateway.errors import MalformedResponse
from reasoning_gateway.types import CallRequest, TokenUsage


class DialectContractTest(ABC):
    """Base class for dialect contract tests."""

    @pytest.fixture
    @abstractmethod
    def dialect(self):
        """Create the dialect instance under test."""
        pass

    @pytest.fixture
    @abstractmethod
    def valid_response_body(self) -> bytes:
        """A successful response body with non-empty content."""
        pass

    @pytest.fixture
    def sample_request(self) -> CallRequest:
        return CallRequest(prompt="What is 2 + 2? Answer with just the number.", temperature=0.0, max_tokens=8)

    def test_endpoint_is_absolute_url(self, dialect):
        """endpoint() must build an absolute URL under the base URL."""
        url = dialect.endpoint("https://api.example.com/v1")

        assert url.startswith("https://api.example.com/v1")

    def test_headers_carry_credential(self, dialect):
        """headers() must put the credential somewhere in the headers."""
        headers = dialect.headers("sk-contract-secret")

        assert isinstance(headers, dict)
        assert any("sk-contract-secret" in value for value in headers.values())

    def test_build_body_returns_bytes(self, dialect, sample_request):
        """build_body() must return non-empty bytes."""
        body = dialect.build_body(sample_request, "test-model")

        assert isinstance(body, bytes)
        assert len(body) > 0

    def test_parse_valid_response(self, dialect, valid_response_body):
        """parse_response() must return non-empty content and usage."""
        content, usage = dialect.parse_response(valid_response_body)

        assert isinstance(content, str)
        assert content.strip()
        assert isinstance(usage, TokenUsage)
        assert usage.prompt_tokens >= 0
        assert usage.completion_tokens >= 0
        assert usage.total_tokens >= 0

    @pytest.mark.parametrize("body", [b"", b"not json", b"[]", b"{}", b"null"])
    def test_parse_garbage_raises_malformed(self, dialect, body):
        """parse_response() must raise MalformedResponse, never anything else."""
        with pytest.raises(MalformedResponse):
            dialect.parse_response(body)

    def test_get_name_returns_string(self, dialect):
        """get_name() must return dialect name."""
        name = dialect.get_name()

        assert isinstance(name, str)
        assert len(name) > 0
