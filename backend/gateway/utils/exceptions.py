"""
HTTP Exception helpers to reduce code duplication in routes.

Usage:
    from gateway.utils.exceptions import raise_bad_request, raise_bad_gateway

    raise_bad_request("Unknown provider: foo")
    raise_bad_gateway("Invalid API key for openai")
"""

from typing import NoReturn

from fastapi import HTTPException, status


def raise_bad_request(detail: str) -> NoReturn:
    """Raise HTTP 400 Bad Request."""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


def raise_bad_gateway(detail: str) -> NoReturn:
    """Raise HTTP 502 Bad Gateway."""
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=detail,
    )


def raise_internal_error(detail: str = "Internal server error") -> NoReturn:
    """Raise HTTP 500 Internal Server Error."""
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )
