from typing import Any, Dict, Optional

from gateway.models.request import ChatRequest
from gateway.providers.base import JSON_CONTENT_TYPE, BaseProvider, Provider
from gateway.utils.message_helpers import dig, dig_str, format_for_claude, split_system_messages

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(BaseProvider):
    provider = Provider.ANTHROPIC
    base_url = "https://api.anthropic.com/v1"
    parse_error_message = "Failed to parse Anthropic response"

    def build_url(self, request: ChatRequest) -> str:
        return f"{self.base_url}/messages"

    def build_headers(self, request: ChatRequest) -> Dict[str, str]:
        return {
            "x-api-key": request.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": JSON_CONTENT_TYPE,
        }

    def build_body(self, request: ChatRequest) -> Dict[str, Any]:
        # Claude takes the system prompt as a top-level field, not a message
        system_prompt, messages = split_system_messages(request.messages)

        payload = {
            "model": request.model,
            "messages": [format_for_claude(msg) for msg in messages],
            "max_tokens": self.max_tokens(request),
            "temperature": self.temperature(request),
            "stream": request.stream,
        }
        if system_prompt:
            payload["system"] = system_prompt
        return payload

    def _extract_text(self, data: Any) -> Optional[str]:
        return dig_str(data, "content", 0, "text")

    def is_done(self, data: Any) -> bool:
        """Check if Claude stream is done."""
        return dig(data, "type") == "message_stop"

    def extract_delta(self, data: Any) -> Optional[str]:
        """Extract text content from Claude SSE data."""
        if dig(data, "type") == "content_block_delta":
            return dig_str(data, "delta", "text")
        return None
