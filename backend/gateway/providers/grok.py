from gateway.providers.base import OpenAIFormatProvider, Provider


class GrokProvider(OpenAIFormatProvider):
    """xAI Grok provider - uses OpenAI-compatible API."""

    provider = Provider.XAI
    base_url = "https://api.x.ai/v1"
