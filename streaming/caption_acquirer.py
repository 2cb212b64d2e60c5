"""
caption_acquirer.py - Get a usable caption list out of a chat model.

Runs a short self-correcting conversation: every reply that cannot be parsed,
or holds too few captions, is answered with the problem so the model can fix
its own output on the next turn.
"""

import logging
from typing import TYPE_CHECKING

from streaming.streaming_utils import ParseError, parse_caption_array

if TYPE_CHECKING:
    from streaming.providers.base import ChatMessage, LLMProvider

_log = logging.getLogger("streaming.acquire")

DEFAULT_MAX_ATTEMPTS = 5

# Finish reasons meaning the reply hit the output token limit
TRUNCATED_FINISH_REASONS = {"LENGTH", "MAX_TOKENS"}


class ExhaustedRetriesError(Exception):
    """No acceptable caption list within the attempt budget."""

    def __init__(self, attempts: int, items: list[str] | None, last_error: str | None):
        self.attempts = attempts
        self.items = items
        self.last_error = last_error
        super().__init__(
            f"no usable caption list after {attempts} attempts"
            + (f" (last problem: {last_error})" if last_error else "")
        )


def shortfall_message(min_items: int, got: int) -> str:
    """Feedback sent when the model returns too few captions."""
    return f"Not enough items. I need at least {min_items}, but got {got}"


def truncation_message(error: str) -> str:
    """Feedback sent when the reply was cut off by the output token limit."""
    return f"{error}. Your response was truncated. Keep every item short and close the array."


def acquire_captions(
    provider: "LLMProvider",
    prompt: str,
    min_items: int,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    messages: list["ChatMessage"] | None = None,
) -> list[str]:
    """
    Ask the provider for captions until a valid list arrives.

    Args:
        provider: LLMProvider instance (from get_provider())
        prompt: Fully rendered prompt; becomes the first user message
        min_items: Minimum number of captions to accept
        max_attempts: Maximum provider calls, capped at 5 (default: 5)
        messages: Optional list to record the conversation into; it is only
            ever appended to

    Returns:
        The accepted caption list

    Raises:
        ProviderError: If a provider call fails (not retried)
        ExhaustedRetriesError: If max_attempts calls produced nothing usable
    """
    if messages is None:
        messages = []
    messages.append({"role": "user", "content": prompt})

    max_attempts = min(max_attempts, DEFAULT_MAX_ATTEMPTS)

    # An empty list can never be paced
    required = max(min_items, 1)
    items = None
    last_error = None

    for attempt in range(1, max_attempts + 1):
        result = provider.generate_chat(list(messages))
        reply = result.get("content", "")
        messages.append({"role": "assistant", "content": reply})

        try:
            items = parse_caption_array(reply)
        except ParseError as e:
            last_error = str(e)
            if result.get("finish_reason", "").upper() in TRUNCATED_FINISH_REASONS:
                last_error = truncation_message(last_error)
            _log.info("Attempt %d/%d: unusable reply: %s", attempt, max_attempts, e)
            messages.append({"role": "user", "content": last_error})
            continue

        if len(items) < required:
            last_error = shortfall_message(required, len(items))
            _log.info("Attempt %d/%d: %s", attempt, max_attempts, last_error)
            messages.append({"role": "user", "content": last_error})
            continue

        _log.debug(
            "Attempt %d/%d: accepted %d captions (%d input / %d output tokens)",
            attempt, max_attempts, len(items),
            result.get("input_tokens", 0), result.get("output_tokens", 0),
        )
        return items

    raise ExhaustedRetriesError(max_attempts, items, last_error)
