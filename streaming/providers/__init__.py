"""
providers - Chat LLM provider interface.

Provides a single interface for sending a conversation to different LLM
providers (OpenAI, Anthropic) and getting the assistant's reply back.

Usage:
    from streaming.providers import get_provider

    provider = get_provider(config)
    result = provider.generate_chat([{"role": "user", "content": "Hi"}])
    print(result["content"])
"""

from .base import (
    LLMProvider,
    ChatMessage,
    ChatResult,
    ProviderError,
    RateLimitError,
    AuthenticationError,
)


def get_provider(config) -> LLMProvider:
    """
    Factory function to get the appropriate provider based on config.

    Uses deferred imports so a missing SDK only matters for the provider in use.

    Provider resolution order:
        1. config.provider
        2. Registry default_provider from models.yaml

    Args:
        config: AppConfig instance

    Returns:
        LLMProvider instance for the configured provider

    Raises:
        ValueError: If provider is unknown or not specified anywhere
        ImportError: If provider SDK is not installed
    """
    provider_name = config.provider

    if not provider_name:
        registry = LLMProvider.load_model_registry()
        provider_name = registry.get("default_provider")

    if not provider_name:
        raise ValueError(
            "No provider specified in config and no default_provider in registry. "
            "Set provider to 'openai' or 'anthropic'."
        )

    provider_name = provider_name.lower()

    if provider_name == "openai":
        from .openai import OpenAIProvider
        return OpenAIProvider(config)

    elif provider_name == "anthropic":
        from .anthropic import AnthropicProvider
        return AnthropicProvider(config)

    else:
        raise ValueError(
            f"Unknown provider: '{provider_name}'. "
            f"Supported providers: openai, anthropic"
        )


__all__ = [
    "LLMProvider",
    "ChatMessage",
    "ChatResult",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "get_provider",
]
