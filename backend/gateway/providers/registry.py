import logging
from typing import Dict, List, Type

from gateway.models.request import ChatRequest, PreparedRequest
from gateway.providers.base import BaseProvider, Provider
from gateway.providers.claude import ClaudeProvider
from gateway.providers.gemini import GeminiProvider
from gateway.providers.grok import GrokProvider
from gateway.providers.openai import OpenAIProvider

logger = logging.getLogger(__name__)


# Mapping of provider identifiers to their classes; must cover every Provider member
PROVIDER_CLASSES: Dict[Provider, Type[BaseProvider]] = {
    Provider.OPENAI: OpenAIProvider,
    Provider.XAI: GrokProvider,
    Provider.ANTHROPIC: ClaudeProvider,
    Provider.GEMINI: GeminiProvider,
}


def get_provider(name: str) -> BaseProvider:
    """Resolve a provider identifier to a provider instance.

    Raises UnknownProviderError for identifiers outside the supported set.
    """
    return PROVIDER_CLASSES[Provider.parse(name)]()


def get_provider_names() -> List[str]:
    """Return identifiers of all supported providers"""
    return [p.value for p in PROVIDER_CLASSES]


def build_request(request: ChatRequest) -> PreparedRequest:
    """Build URL, headers and payload for a request.

    Fails before producing anything if the provider is unknown.
    """
    provider = get_provider(request.provider)
    prepared = provider.build_request(request)
    logger.debug(f"Built {provider.name} request for model {request.model}")
    return prepared
