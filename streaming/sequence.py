"""
sequence.py - Run one countdown phase from prompt to finished progress bar.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from streaming.caption_acquirer import acquire_captions
from streaming.config import load_template, render_template
from streaming.pacer import CaptionSink, TickClock, run_countdown

if TYPE_CHECKING:
    from streaming.config import AppConfig
    from streaming.providers.base import LLMProvider

_log = logging.getLogger("streaming.sequence")

# One caption per this many seconds of countdown
SECONDS_PER_CAPTION = 6


@dataclass(frozen=True)
class PromptRequest:
    template_name: str
    duration_seconds: int

    @property
    def min_items(self) -> int:
        return self.duration_seconds // SECONDS_PER_CAPTION


class SequenceRunner:
    """
    Binds config, a chat provider and a display together.

    Args:
        config: Loaded AppConfig
        provider: Chat provider used for caption acquisition
        sink_factory: Called with the sequence title, returns a CaptionSink
        clock: Tick source; defaults to a real-time TickClock per run
    """

    def __init__(
        self,
        config: "AppConfig",
        provider: "LLMProvider",
        sink_factory: Callable[[str], CaptionSink],
        clock: TickClock | None = None,
    ):
        self.config = config
        self.provider = provider
        self.sink_factory = sink_factory
        self.clock = clock

    def fetch_captions(self, request: PromptRequest) -> list[str]:
        """Render the template for `request` and acquire a caption list."""
        template = load_template(self.config, request.template_name)
        prompt = render_template(template, request.min_items)
        _log.info(
            "Requesting at least %d captions for %s (%ds)",
            request.min_items, request.template_name, request.duration_seconds,
        )
        return acquire_captions(
            self.provider,
            prompt,
            request.min_items,
            max_attempts=self.config.max_attempts,
        )

    def run_sequence(self, template_name: str, duration_seconds: int, title: str = "") -> list[str]:
        """
        Acquire captions and play the countdown.

        Returns:
            The captions that were shown

        Raises:
            TemplateNotFoundError, ProviderError, ExhaustedRetriesError, ValueError
        """
        request = PromptRequest(template_name, duration_seconds)
        captions = self.fetch_captions(request)
        clock = self.clock or TickClock(self.config.tick_seconds)
        run_countdown(captions, duration_seconds, self.sink_factory(title), clock)
        return captions
