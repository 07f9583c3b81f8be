from gateway.providers.base import BaseProvider, Provider
from gateway.providers.registry import build_request, get_provider

__all__ = ["BaseProvider", "Provider", "build_request", "get_provider"]
