"""Hosted model providers for the model-assisted extraction path."""
from .base import LLMProvider, get_provider, list_providers, provider_from_env, register_provider
from .anthropic_provider import AnthropicProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "LLMProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "get_provider",
    "list_providers",
    "provider_from_env",
    "register_provider",
]
