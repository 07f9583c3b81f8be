"""
Gateway error taxonomy.

Every failure a call can produce derives from GatewayError and carries a
display-ready message. Nothing in the gateway retries; callers decide.
"""

from enum import Enum
from typing import Optional


class GatewayError(Exception):
    """Base class for all gateway failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientSetupError(GatewayError):
    """The HTTP transport could not be constructed."""


class UnknownProviderError(GatewayError):
    """Provider identifier is not part of the supported set."""

    def __init__(self, provider: str):
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


class NetworkErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECT = "connect"
    OTHER = "other"


class NetworkError(GatewayError):
    """The request never produced a response."""

    def __init__(self, message: str, kind: NetworkErrorKind = NetworkErrorKind.OTHER):
        super().__init__(message)
        self.kind = kind


class HttpStatusError(GatewayError):
    """Provider answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(GatewayError):
    """Response body was not JSON or lacked the expected field."""


class StreamTransportError(GatewayError):
    """Connection failed while iterating a streaming body."""
