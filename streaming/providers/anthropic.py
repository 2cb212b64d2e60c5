"""
anthropic.py - Anthropic Claude chat provider implementation.

Implements the LLMProvider interface with Anthropic's Messages API.

Secrets required:
    ANTHROPIC_API_KEY: API key for Anthropic API access
"""

from .base import (
    LLMProvider,
    ChatMessage,
    ChatResult,
    ProviderError,
    RateLimitError,
    AuthenticationError,
)


class AnthropicProvider(LLMProvider):
    """
    Anthropic Claude chat provider.

    Config options:
        model: Model to use (default from models.yaml)
        request_timeout: Seconds before a request is abandoned

    max_tokens comes from the registry entry and falls back to DEFAULT_MAX_TOKENS.
    """

    name = "anthropic"
    DEFAULT_MAX_TOKENS = 4096

    def __init__(self, config):
        """
        Initialize the Anthropic provider.

        Raises:
            AuthenticationError: If API key not set
            ImportError: If anthropic package not installed
        """
        super().__init__(config)
        self._validate_sdk()
        self._api_key = self._require_api_key()
        self._init_client()
        provider_info = LLMProvider.get_provider_info(self.name)
        self.max_tokens = provider_info.get("max_tokens", self.DEFAULT_MAX_TOKENS)

    def _validate_sdk(self):
        """Check that anthropic SDK is installed."""
        try:
            import anthropic
            self._anthropic = anthropic
        except ImportError:
            raise ImportError(
                "anthropic package not installed. "
                "Install with: pip install anthropic>=0.30.0"
            )

    def _init_client(self):
        """Initialize the Anthropic client."""
        from anthropic import Anthropic
        self._client = Anthropic(api_key=self._api_key, timeout=self.timeout)

    def generate_chat(self, messages: list[ChatMessage]) -> ChatResult:
        """
        Send the conversation to Claude and return the assistant reply.

        Raises:
            RateLimitError: For 429 or quota errors
            AuthenticationError: For invalid keys
            ProviderError: For other API errors
        """
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": m["role"], "content": m["content"]} for m in messages],
            )
        except self._anthropic.RateLimitError as e:
            raise RateLimitError(f"Anthropic rate limit exceeded: {e}") from e
        except self._anthropic.AuthenticationError as e:
            raise AuthenticationError(f"Anthropic authentication failed: {e}") from e
        except self._anthropic.APIError as e:
            raise ProviderError(f"Anthropic API error: {e}") from e

        # Content blocks can be text or other types
        content = "".join(
            block.text for block in (response.content or []) if hasattr(block, "text")
        )

        input_tokens = 0
        output_tokens = 0
        if response.usage:
            input_tokens = response.usage.input_tokens or 0
            output_tokens = response.usage.output_tokens or 0

        finish_reason = response.stop_reason or "end_turn"

        return ChatResult(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=finish_reason.upper()
        )
