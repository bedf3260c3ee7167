"""Base dialect interface - how a provider's wire schema is spoken"""

from abc import ABC, abstractmethod

from reasoning_gateway.types import CallRequest, TokenUsage


class ProviderDialect(ABC):
    """Abstract base class for provider request/response schemas.

    The adapter core treats the remote API as opaque; a dialect is the only
    place that knows a vendor's endpoint path, auth header and JSON shape.
    External packages can ship dialects through the
    ``reasoning_gateway.dialects`` entry point group.
    """

    name: str = ""

    @abstractmethod
    def endpoint(self, base_url: str) -> str:
        """
        Build the full URL for a completion request

        Args:
            base_url: Provider base URL without trailing slash

        Returns:
            Absolute endpoint URL
        """
        pass

    @abstractmethod
    def headers(self, credential: str) -> dict[str, str]:
        """
        Build request headers, including authentication

        Args:
            credential: Provider API credential

        Returns:
            Header mapping
        """
        pass

    @abstractmethod
    def build_body(self, request: CallRequest, model: str) -> bytes:
        """
        Serialize a call request

        Args:
            request: Validated call request
            model: Resolved model identifier

        Returns:
            Request body bytes
        """
        pass

    @abstractmethod
    def parse_response(self, body: bytes) -> tuple[str, TokenUsage]:
        """
        Extract content and token usage from a successful response

        Args:
            body: Raw 2xx response body

        Returns:
            Tuple of (non-empty content, usage)

        Raises:
            MalformedResponse: If the body lacks usable content
        """
        pass

    def get_name(self) -> str:
        """Get dialect name"""
        return self.name or self.__class__.__name__
