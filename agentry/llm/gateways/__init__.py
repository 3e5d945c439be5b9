"""LLM provider gateways."""

from .anthropic_gateway import AnthropicGateway
from .openai_gateway import OpenAIGateway

__all__ = ["AnthropicGateway", "OpenAIGateway", "create_gateway"]


def create_gateway(provider: str):
    """Build the gateway for a provider name ("anthropic" or "openai")."""
    if provider == "anthropic":
        return AnthropicGateway()
    if provider == "openai":
        return OpenAIGateway()
    raise ValueError(f"Unknown LLM provider: {provider}")
