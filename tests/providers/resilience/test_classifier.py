"""Tests for failure classification.

Covers:
- Status code mapping (429, 4xx, 5xx, 2xx)
- Exception mapping (timeouts, transport errors, malformed bodies)
- Totality: arbitrary inputs always map to exactly one label
"""

import asyncio
from unittest.mock import Mock

import httpx
import pytest

from reasoning_gateway.errors import MalformedResponse, TransportError, TransportTimeout
from reasoning_gateway.providers.resilience import classify, classify_status
from reasoning_gateway.providers.transport import TransportResponse
from reasoning_gateway.types import FailureLabel


class TestStatusClassification:
    """Test HTTP status code labels."""

    def test_429_is_rate_limited(self):
        assert classify(429) == FailureLabel.RATE_LIMITED

    @pytest.mark.parametrize("status", [500, 502, 503, 504, 599])
    def test_5xx_is_server_error(self, status):
        assert classify(status) == FailureLabel.SERVER_ERROR

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422, 428, 430, 499])
    def test_4xx_except_429_is_client_error(self, status):
        assert classify(status) == FailureLabel.CLIENT_ERROR

    def test_2xx_without_content_is_malformed(self):
        assert classify_status(200) == FailureLabel.MALFORMED

    @pytest.mark.parametrize("status", [0, 100, 302, 600, -1])
    def test_unexpected_status_is_server_error(self, status):
        assert classify_status(status) == FailureLabel.SERVER_ERROR

    def test_transport_response(self):
        response = TransportResponse(status_code=503, body=b"unavailable")

        assert classify(response) == FailureLabel.SERVER_ERROR

    def test_httpx_response(self):
        response = httpx.Response(429, content=b"slow down")

        assert classify(response) == FailureLabel.RATE_LIMITED

    def test_httpx_status_error(self):
        request = httpx.Request("POST", "https://api.example.com/chat/completions")
        response = httpx.Response(401, request=request)
        error = httpx.HTTPStatusError("unauthorized", request=request, response=response)

        assert classify(error) == FailureLabel.CLIENT_ERROR


class TestErrorClassification:
    """Test exception labels."""

    @pytest.mark.parametrize("error", [
        asyncio.TimeoutError(),
        TimeoutError("deadline"),
        TransportTimeout("POST timed out"),
        httpx.ReadTimeout("read timed out"),
        httpx.ConnectTimeout("connect timed out"),
    ])
    def test_timeouts(self, error):
        assert classify(error) == FailureLabel.TIMEOUT

    @pytest.mark.parametrize("error", [
        TransportError("connection reset"),
        httpx.ConnectError("refused"),
        ConnectionResetError("reset by peer"),
    ])
    def test_network_errors_are_server_errors(self, error):
        assert classify(error) == FailureLabel.SERVER_ERROR

    def test_malformed_response(self):
        assert classify(MalformedResponse("no content")) == FailureLabel.MALFORMED

    def test_error_with_status_code_attribute(self):
        error = RuntimeError("sdk error")
        error.status_code = 429

        assert classify(error) == FailureLabel.RATE_LIMITED

    def test_unknown_error_is_malformed(self):
        assert classify(ValueError("what")) == FailureLabel.MALFORMED


class TestTotality:
    """classify() must return exactly one label and never raise."""

    @pytest.mark.parametrize("value", [
        None,
        "500",
        b"",
        3.5,
        True,
        [],
        {},
        object(),
        Mock(status_code="not-an-int"),
        KeyboardInterrupt(),
    ])
    def test_arbitrary_inputs(self, value):
        label = classify(value)

        assert isinstance(label, FailureLabel)

    def test_object_whose_attribute_access_raises(self):
        class Exploding:
            @property
            def status_code(self):
                raise RuntimeError("boom")

        assert classify(Exploding()) == FailureLabel.MALFORMED

    def test_every_status_code_maps_to_a_label(self):
        for status in range(0, 1000):
            assert isinstance(classify(status), FailureLabel)
