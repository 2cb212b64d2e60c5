"""Tests for the self-correcting caption acquisition loop."""

import pytest

from conftest import FakeProvider
from streaming.caption_acquirer import (
    ExhaustedRetriesError,
    acquire_captions,
    shortfall_message,
)
from streaming.providers.base import ProviderError

TEN = '["1", "2", "3", "4", "5", "6", "7", "8", "9", "10"]'


class TestAcceptance:

    def test_first_valid_reply_wins(self):
        """A good first reply costs exactly one call."""
        provider = FakeProvider(['Sure! ["a", "b"]'])
        assert acquire_captions(provider, "prompt", 2) == ["a", "b"]
        assert len(provider.calls) == 1
        assert provider.calls[0] == [{"role": "user", "content": "prompt"}]

    def test_extra_captions_are_fine(self):
        provider = FakeProvider([TEN])
        assert len(acquire_captions(provider, "prompt", 3)) == 10


class TestSelfCorrection:
    """Problems are fed back to the model as user messages."""

    def test_parse_error_is_fed_back(self):
        provider = FakeProvider(["no json here", '["a", "b"]'])
        assert acquire_captions(provider, "prompt", 2) == ["a", "b"]
        assert provider.calls[1] == [
            {"role": "user", "content": "prompt"},
            {"role": "assistant", "content": "no json here"},
            {"role": "user", "content": "could not find json array in response"},
        ]

    def test_short_list_is_rejected(self):
        """Sixty seconds needs ten captions; three are not enough."""
        provider = FakeProvider(['["a", "b", "c"]', TEN])
        items = acquire_captions(provider, "prompt", 10)
        assert len(items) == 10
        assert provider.calls[1][-1] == {
            "role": "user",
            "content": "Not enough items. I need at least 10, but got 3",
        }

    @pytest.mark.parametrize("finish_reason", ["LENGTH", "MAX_TOKENS"])
    def test_truncated_reply_is_reported(self, finish_reason):
        """A reply cut off by the token limit is answered with a shorter-output hint."""
        provider = FakeProvider([('["a", "b", "c', finish_reason), '["a", "b", "c"]'])
        assert acquire_captions(provider, "prompt", 3) == ["a", "b", "c"]
        feedback = provider.calls[1][-1]["content"]
        assert feedback.startswith("could not find json array in response")
        assert "truncated" in feedback

    def test_untruncated_parse_error_has_plain_feedback(self):
        provider = FakeProvider(["no json", '["a"]'])
        acquire_captions(provider, "prompt", 1)
        assert "truncated" not in provider.calls[1][-1]["content"]

    def test_empty_list_never_accepted(self):
        """Even with no minimum an empty list cannot be paced."""
        provider = FakeProvider(["[ ]", '["a"]'])
        assert acquire_captions(provider, "prompt", 0) == ["a"]
        assert provider.calls[1][-1]["content"] == shortfall_message(1, 0)

    def test_history_is_only_appended(self):
        """Every request starts with the full previous request."""
        provider = FakeProvider(["nope", "[1, 2]", '["a"]', TEN])
        acquire_captions(provider, "prompt", 10)
        for earlier, later in zip(provider.calls, provider.calls[1:]):
            assert later[:len(earlier)] == earlier
            assert len(later) == len(earlier) + 2

    def test_conversation_is_recorded(self):
        provider = FakeProvider(["nope", '["a"]'])
        messages = []
        acquire_captions(provider, "prompt", 1, messages=messages)
        assert [m["role"] for m in messages] == ["user", "assistant", "user", "assistant"]


class TestRetryBudget:

    def test_never_more_than_five_calls(self):
        provider = FakeProvider(["bad"] * 10)
        with pytest.raises(ExhaustedRetriesError) as exc_info:
            acquire_captions(provider, "prompt", 1)
        assert len(provider.calls) == 5
        assert exc_info.value.attempts == 5
        assert exc_info.value.items is None

    def test_last_short_list_is_carried(self):
        provider = FakeProvider(['["a"]'] * 4 + ['["a", "b"]'])
        with pytest.raises(ExhaustedRetriesError) as exc_info:
            acquire_captions(provider, "prompt", 10)
        assert exc_info.value.items == ["a", "b"]
        assert "but got 2" in str(exc_info.value)

    def test_custom_budget(self):
        provider = FakeProvider(["bad"] * 3)
        with pytest.raises(ExhaustedRetriesError):
            acquire_captions(provider, "prompt", 1, max_attempts=2)
        assert len(provider.calls) == 2

    def test_budget_is_capped_at_five(self):
        """A larger budget never buys more than five calls."""
        provider = FakeProvider(["bad"] * 9)
        with pytest.raises(ExhaustedRetriesError) as exc_info:
            acquire_captions(provider, "prompt", 1, max_attempts=9)
        assert len(provider.calls) == 5
        assert exc_info.value.attempts == 5


class TestProviderFailures:

    def test_provider_error_is_not_retried(self):
        provider = FakeProvider([ProviderError("boom"), TEN])
        with pytest.raises(ProviderError, match="boom"):
            acquire_captions(provider, "prompt", 1)
        assert len(provider.calls) == 1
