from gateway.providers.base import OpenAIFormatProvider, Provider


class OpenAIProvider(OpenAIFormatProvider):
    """OpenAI GPT provider."""

    provider = Provider.OPENAI
    base_url = "https://api.openai.com/v1"
