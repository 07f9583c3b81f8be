"""
Human-readable classification of provider HTTP errors.
"""

from typing import Optional

import orjson

from gateway.utils.message_helpers import dig_str

# Raw bodies are cut to this many characters in messages
BODY_PREVIEW_CHARS = 300
SERVER_ERROR_STATUSES = (500, 502, 503)


def _error_message_from_body(body_text: str) -> Optional[str]:
    """Read error.message from a JSON error body, None if absent or not JSON."""
    try:
        data = orjson.loads(body_text)
    except orjson.JSONDecodeError:
        return None
    return dig_str(data, "error", "message")


def classify(status: int, provider: str, model: str, body_text: str) -> str:
    """
    Turn a non-2xx provider response into a displayable message.

    Args:
        status: HTTP status code
        provider: Provider identifier, named in every message
        model: Model that was requested
        body_text: Raw response body

    Returns:
        The message; this function never raises.
    """
    provider = str(provider)
    body_text = body_text or ""

    if status == 401:
        return f"Invalid API key for {provider}"
    if status == 429:
        return f"Rate limited by {provider}. Wait and retry."
    if status == 404:
        return f"Model {model} not found on {provider}"
    if status == 400:
        detail = _error_message_from_body(body_text)
        if detail is None:
            detail = body_text[:BODY_PREVIEW_CHARS]
        return f"Bad request to {provider}: {detail}"
    if status in SERVER_ERROR_STATUSES:
        return f"{provider} server error. Try again later."
    return f"{provider} returned status {status}: {body_text[:BODY_PREVIEW_CHARS]}"
