from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

from gateway.errors import ParseError, UnknownProviderError
from gateway.models.request import ChatRequest, PreparedRequest
from gateway.utils.message_helpers import dig, dig_str, format_for_openai

# Constants
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096
JSON_CONTENT_TYPE = "application/json"


class Provider(str, Enum):
    """Closed set of supported vendors, keyed by wire identifier."""

    OPENAI = "openai"
    XAI = "xai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "Provider":
        """Resolve a provider identifier, raising UnknownProviderError if unsupported."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownProviderError(value) from None


class BaseProvider(ABC):
    """Abstract base class for AI providers.

    A provider knows how to shape a ChatRequest for its vendor and how to read
    the vendor's responses. It holds no per-call state.
    """

    provider: Provider
    base_url: str = ""  # Override in subclass
    parse_error_message: str = "Failed to parse response from API"

    @property
    def name(self) -> str:
        return self.provider.value

    @staticmethod
    def temperature(request: ChatRequest) -> float:
        if request.temperature is None:
            return DEFAULT_TEMPERATURE
        return request.temperature

    @staticmethod
    def max_tokens(request: ChatRequest) -> int:
        if request.max_tokens is None:
            return DEFAULT_MAX_TOKENS
        return request.max_tokens

    @abstractmethod
    def build_url(self, request: ChatRequest) -> str:
        """Target endpoint for this request"""
        pass

    @abstractmethod
    def build_headers(self, request: ChatRequest) -> Dict[str, str]:
        """Request headers, including authentication where it travels in a header"""
        pass

    @abstractmethod
    def build_body(self, request: ChatRequest) -> Dict[str, Any]:
        """Vendor-shaped JSON payload"""
        pass

    def build_request(self, request: ChatRequest) -> PreparedRequest:
        return PreparedRequest(
            url=self.build_url(request),
            headers=self.build_headers(request),
            body=self.build_body(request),
        )

    @abstractmethod
    def _extract_text(self, data: Any) -> Optional[str]:
        """Read generated text from a complete response body, None if absent."""
        pass

    def extract_text(self, data: Any) -> str:
        """Extract the generated text from a parsed non-streaming response."""
        text = self._extract_text(data)
        if text is None:
            raise ParseError(self.parse_error_message)
        return text

    @abstractmethod
    def is_done(self, data: Any) -> bool:
        """Check if a parsed stream event marks the end of the stream."""
        pass

    @abstractmethod
    def extract_delta(self, data: Any) -> Optional[str]:
        """Extract text content from a parsed stream event."""
        pass


class OpenAIFormatProvider(BaseProvider):
    """Base class for providers using OpenAI-compatible API format.

    Subclasses only need to set `provider` and `base_url` class attributes.
    """

    def build_url(self, request: ChatRequest) -> str:
        return f"{self.base_url}/chat/completions"

    def build_headers(self, request: ChatRequest) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {request.api_key}",
            "Content-Type": JSON_CONTENT_TYPE,
        }

    def build_body(self, request: ChatRequest) -> Dict[str, Any]:
        # System messages stay inline, in their original positions
        return {
            "model": request.model,
            "messages": [format_for_openai(msg) for msg in request.messages],
            "temperature": self.temperature(request),
            "max_tokens": self.max_tokens(request),
            "stream": request.stream,
        }

    def _extract_text(self, data: Any) -> Optional[str]:
        return dig_str(data, "choices", 0, "message", "content")

    def is_done(self, data: Any) -> bool:
        return dig(data, "choices", 0, "finish_reason") in ("stop", "end_turn")

    def extract_delta(self, data: Any) -> Optional[str]:
        return dig_str(data, "choices", 0, "delta", "content")
