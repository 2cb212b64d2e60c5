"""
openai.py - OpenAI chat provider implementation.

Implements the LLMProvider interface with OpenAI's Chat Completions API.

Secrets required:
    OPENAI_API_KEY: API key for OpenAI API access
"""

from .base import (
    LLMProvider,
    ChatMessage,
    ChatResult,
    ProviderError,
    RateLimitError,
    AuthenticationError,
)


class OpenAIProvider(LLMProvider):
    """
    OpenAI chat provider.

    Config options:
        model: Model to use (default from models.yaml: "gpt-4o-mini")
        request_timeout: Seconds before a request is abandoned
    """

    name = "openai"

    def __init__(self, config):
        """
        Initialize the OpenAI provider.

        Raises:
            AuthenticationError: If API key not set
            ImportError: If openai package not installed
        """
        super().__init__(config)
        self._validate_sdk()
        self._api_key = self._require_api_key()
        self._init_client()

    def _validate_sdk(self):
        """Check that openai SDK is installed."""
        try:
            import openai
            self._openai = openai
        except ImportError:
            raise ImportError(
                "openai package not installed. "
                "Install with: pip install openai>=1.0.0"
            )

    def _init_client(self):
        """Initialize the OpenAI client."""
        from openai import OpenAI
        self._client = OpenAI(api_key=self._api_key, timeout=self.timeout)

    def generate_chat(self, messages: list[ChatMessage]) -> ChatResult:
        """
        Send the conversation to OpenAI and return the assistant reply.

        Raises:
            RateLimitError: For 429 or quota errors
            AuthenticationError: For invalid keys
            ProviderError: For other API errors
        """
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": m["role"], "content": m["content"]} for m in messages],
            )
        except self._openai.RateLimitError as e:
            raise RateLimitError(f"OpenAI rate limit exceeded: {e}") from e
        except self._openai.AuthenticationError as e:
            raise AuthenticationError(f"OpenAI authentication failed: {e}") from e
        except self._openai.APIError as e:
            raise ProviderError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise ProviderError("OpenAI API returned no choices")

        choice = response.choices[0]
        content = ""
        if choice.message:
            content = choice.message.content or ""

        input_tokens = 0
        output_tokens = 0
        if response.usage:
            input_tokens = response.usage.prompt_tokens or 0
            output_tokens = response.usage.completion_tokens or 0

        finish_reason = choice.finish_reason or "stop"

        return ChatResult(
            content=content,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=finish_reason.upper()
        )
