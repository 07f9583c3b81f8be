"""
Final-text extraction for non-streaming responses.

Each provider has exactly one field path; there are no fallbacks, so a
well-formed body of the wrong shape is still a ParseError.
"""

from typing import Any

import orjson

from gateway.errors import ParseError
from gateway.providers.registry import get_provider


def extract_text(provider: str, body: Any) -> str:
    """Extract the generated text from an already parsed response body."""
    return get_provider(provider).extract_text(body)


def parse_and_extract(provider: str, raw: bytes | str) -> str:
    """Parse a raw JSON response body and extract the generated text."""
    try:
        body = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ParseError(f"Failed to parse response JSON: {e}") from e
    return extract_text(provider, body)
