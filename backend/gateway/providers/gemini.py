from typing import Any, Dict, Optional

from gateway.models.request import ChatRequest
from gateway.providers.base import JSON_CONTENT_TYPE, BaseProvider, Provider
from gateway.utils.message_helpers import dig, dig_str, format_for_gemini, split_system_messages


class GeminiProvider(BaseProvider):
    provider = Provider.GEMINI
    base_url = "https://generativelanguage.googleapis.com/v1beta"
    parse_error_message = "Failed to parse Gemini response"

    def build_url(self, request: ChatRequest) -> str:
        # Gemini authenticates with a query parameter rather than a header
        model_url = f"{self.base_url}/models/{request.model}"
        if request.stream:
            return f"{model_url}:streamGenerateContent?alt=sse&key={request.api_key}"
        return f"{model_url}:generateContent?key={request.api_key}"

    def build_headers(self, request: ChatRequest) -> Dict[str, str]:
        return {"Content-Type": JSON_CONTENT_TYPE}

    def build_body(self, request: ChatRequest) -> Dict[str, Any]:
        system_prompt, messages = split_system_messages(request.messages)

        payload = {
            "contents": [format_for_gemini(msg) for msg in messages],
            "generationConfig": {
                "temperature": self.temperature(request),
                "maxOutputTokens": self.max_tokens(request),
            },
        }
        if system_prompt:
            payload["systemInstruction"] = {
                "parts": [{"text": system_prompt}]
            }
        return payload

    def _extract_text(self, data: Any) -> Optional[str]:
        return dig_str(data, "candidates", 0, "content", "parts", 0, "text")

    def is_done(self, data: Any) -> bool:
        return dig(data, "candidates", 0, "finishReason") in ("STOP", "MAX_TOKENS")

    def extract_delta(self, data: Any) -> Optional[str]:
        """Extract text content from Gemini SSE data."""
        return dig_str(data, "candidates", 0, "content", "parts", 0, "text")
