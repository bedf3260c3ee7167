"""Tests for the OpenAI-compatible chat completions dialect"""

import json

import pytest

from reasoning_gateway.errors import MalformedResponse
from reasoning_gateway.providers.dialects import OpenAIChatDialect
from reasoning_gateway.testing import DialectContractTest, chat_completion_body
from reasoning_gateway.types import CallRequest, TokenUsage


class TestOpenAIChatContract(DialectContractTest):
    """OpenAIChatDialect satisfies the dialect contract"""

    @pytest.fixture
    def dialect(self):
        return OpenAIChatDialect()

    @pytest.fixture
    def valid_response_body(self):
        return chat_completion_body("4")


class TestOpenAIChatDialect:

    @pytest.fixture
    def dialect(self):
        return OpenAIChatDialect()

    def test_endpoint_strips_trailing_slash(self, dialect):
        assert dialect.endpoint("https://api.deepseek.com/v1/") == "https://api.deepseek.com/v1/chat/completions"

    def test_headers(self, dialect):
        assert dialect.headers("sk-abc") == {
            "Content-Type": "application/json",
            "Authorization": "Bearer sk-abc",
        }

    def test_build_body(self, dialect):
        request = CallRequest(prompt="Hello", temperature=0.7, max_tokens=64)

        payload = json.loads(dialect.build_body(request, "deepseek-r1"))

        assert payload == {
            "model": "deepseek-r1",
            "messages": [{"role": "user", "content": "Hello"}],
            "temperature": 0.7,
            "max_tokens": 64,
            "stream": False,
        }

    def test_parse_response(self, dialect):
        content, usage = dialect.parse_response(chat_completion_body("Paris", 7, 1))

        assert content == "Paris"
        assert usage == TokenUsage(prompt_tokens=7, completion_tokens=1, total_tokens=8)

    def test_missing_usage_counts_as_zero(self, dialect):
        body = json.dumps({"choices": [{"message": {"content": "hi"}}]}).encode()

        _, usage = dialect.parse_response(body)

        assert usage == TokenUsage()

    def test_missing_total_is_derived(self, dialect):
        body = json.dumps({
            "choices": [{"message": {"content": "hi"}}],
            "usage": {"prompt_tokens": 3, "completion_tokens": 4},
        }).encode()

        _, usage = dialect.parse_response(body)

        assert usage.total_tokens == 7

    def test_invalid_usage_counters_ignored(self, dialect):
        body = json.dumps({
            "choices": [{"message": {"content": "hi"}}],
            "usage": {"prompt_tokens": -1, "completion_tokens": "5", "total_tokens": None},
        }).encode()

        _, usage = dialect.parse_response(body)

        assert usage == TokenUsage()

    @pytest.mark.parametrize("body", [
        chat_completion_body(content=None),
        chat_completion_body(content=""),
        chat_completion_body(content="   "),
        b'{"choices": [{"message": {"content": 42}}]}',
        b'{"choices": [{"message": null}]}',
        b'{"choices": "nope"}',
        b'\xff\xfe',
    ])
    def test_missing_or_empty_content(self, dialect, body):
        with pytest.raises(MalformedResponse):
            dialect.parse_response(body)
