"""
base.py - Abstract base class for chat LLM providers.

Defines the single interface the caption acquisition loop talks to. Providers
receive the whole conversation on every call and return the assistant's reply.

All providers must implement:
- generate_chat() for synchronous multi-turn chat completion
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypedDict

import yaml

if TYPE_CHECKING:
    from streaming.config import AppConfig


class ChatMessage(TypedDict):
    """One role-tagged message of a conversation."""
    role: Literal["user", "assistant"]
    content: str


class ChatResult(TypedDict):
    """Result from a chat completion call."""
    content: str
    input_tokens: int
    output_tokens: int
    finish_reason: str


class LLMProvider(ABC):
    """
    Abstract base class for chat LLM providers.

    Usage:
        from streaming.providers import get_provider

        provider = get_provider(config)
        result = provider.generate_chat([{"role": "user", "content": "Hi"}])
    """

    name = "base"

    def __init__(self, config: "AppConfig"):
        """
        Initialize the provider.

        Args:
            config: Application config with provider settings
        """
        self.config = config
        self.timeout = config.request_timeout
        provider_info = LLMProvider.get_provider_info(self.name)
        self.model = config.model or provider_info.get("default_model")

    @abstractmethod
    def generate_chat(self, messages: list[ChatMessage]) -> ChatResult:
        """
        Make a single synchronous chat completion request.

        Args:
            messages: Full conversation, oldest first

        Returns:
            ChatResult with the assistant reply, token counts and finish reason

        Raises:
            ProviderError: If the API call fails
        """
        pass

    def get_api_key_env_var(self) -> str:
        """
        Get the environment variable name for this provider's API key.

        Returns:
            Environment variable name (e.g., "OPENAI_API_KEY")
        """
        return LLMProvider.get_provider_info(self.name).get("env_var", "API_KEY")

    def _require_api_key(self) -> str:
        """Look up the API key in the loaded secrets."""
        env_var = self.get_api_key_env_var()
        api_key = self.config.secrets.get(env_var)
        if not api_key:
            raise AuthenticationError(
                f"{env_var} not set. "
                f"Add it to your environment or to the .env file."
            )
        return api_key

    # === Model Registry Methods ===

    @staticmethod
    def load_model_registry() -> dict:
        """Load the model registry from models.yaml."""
        registry_path = Path(__file__).parent / "models.yaml"
        with open(registry_path) as f:
            return yaml.safe_load(f)

    @staticmethod
    def get_provider_info(provider_name: str) -> dict:
        """Get provider-level info (env_var, default_model, max_tokens)."""
        registry = LLMProvider.load_model_registry()
        return registry.get("providers", {}).get(provider_name, {})


class ProviderError(Exception):
    """Base exception for provider errors."""
    pass


class RateLimitError(ProviderError):
    """Rate limit (429) error."""
    pass


class AuthenticationError(ProviderError):
    """Authentication/authorization error."""
    pass
