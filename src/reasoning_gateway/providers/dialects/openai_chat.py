"""OpenAI-compatible chat completions dialect (OpenAI, DeepSeek, vLLM, ...)"""

import json

from reasoning_gateway.errors import MalformedResponse
from reasoning_gateway.providers.base import ProviderDialect
from reasoning_gateway.types import CallRequest, TokenUsage


class OpenAIChatDialect(ProviderDialect):
    """Speaks ``POST {base_url}/chat/completions``"""

    name = "openai_chat"

    def endpoint(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/chat/completions"

    def headers(self, credential: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }

    def build_body(self, request: CallRequest, model: str) -> bytes:
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "stream": False,  # Non-streaming only
        }
        return json.dumps(payload).encode("utf-8")

    def parse_response(self, body: bytes) -> tuple[str, TokenUsage]:
        try:
            data = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedResponse(f"Response body is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponse("Response body is not a JSON object")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise MalformedResponse("Response has no choices[0].message.content") from None

        if not isinstance(content, str) or not content.strip():
            raise MalformedResponse("Response content is empty")

        return content, self._parse_usage(data.get("usage"))

    def _parse_usage(self, usage) -> TokenUsage:
        """Read usage counters; missing or invalid counters count as 0"""
        if not isinstance(usage, dict):
            return TokenUsage()

        def counter(key: str) -> int:
            value = usage.get(key)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                return value
            return 0

        prompt_tokens = counter("prompt_tokens")
        completion_tokens = counter("completion_tokens")
        total_tokens = counter("total_tokens") or prompt_tokens + completion_tokens
        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens,
        )
