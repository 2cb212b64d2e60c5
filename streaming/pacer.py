"""
pacer.py - Spread captions over a fixed-length countdown.

The countdown is a sequence of one-second ticks. Each caption owns
duration // len(captions) consecutive ticks and the last caption keeps
whatever is left over.
"""

import logging
import time
from typing import Callable, Protocol

_log = logging.getLogger("streaming.pacer")


class CaptionSink(Protocol):
    """Anything that can display a countdown: a progress bar, a test recorder."""

    def start(self, total: int) -> None: ...

    def advance(self, amount: int = 1) -> None: ...

    def set_label(self, label: str) -> None: ...

    def finish(self, completed: bool = True) -> None: ...


class TickClock:
    """
    Real-time tick source.

    Waits against absolute deadlines from a monotonic clock, so slow rendering
    on one tick shortens the next wait instead of stretching the countdown.
    """

    def __init__(
        self,
        tick_seconds: float = 1.0,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.tick_seconds = tick_seconds
        self._monotonic = monotonic
        self._sleep = sleep
        self._origin = None

    def start(self) -> None:
        self._origin = self._monotonic()

    def wait_for_tick(self, index: int) -> None:
        """Block until the end of tick `index`."""
        if self._origin is None:
            self.start()
        deadline = self._origin + (index + 1) * self.tick_seconds
        remaining = deadline - self._monotonic()
        if remaining > 0:
            self._sleep(remaining)


def ticks_per_caption(caption_count: int, duration_seconds: int) -> int:
    """Ticks each caption is shown for; never less than one."""
    if caption_count <= 0:
        raise ValueError("cannot pace an empty caption list")
    return max(1, duration_seconds // caption_count)


def caption_schedule(captions: list[str], duration_seconds: int) -> dict[int, str]:
    """
    Map each tick where the label changes to the caption shown from that tick.

    Boundaries fall on every multiple of ticks_per_caption. When there are more
    boundaries than captions the last caption is reused.
    """
    step = ticks_per_caption(len(captions), duration_seconds)
    schedule = {}
    index = 0
    for tick in range(0, duration_seconds, step):
        schedule[tick] = captions[min(index, len(captions) - 1)]
        index += 1
    return schedule


def run_countdown(
    captions: list[str],
    duration_seconds: int,
    sink: CaptionSink,
    clock: TickClock | None = None,
) -> None:
    """
    Drive `sink` through a real-time countdown of `duration_seconds` ticks.

    Raises:
        ValueError: If the duration is not positive or there are no captions
        KeyboardInterrupt: Propagated after the sink is closed; any other
            error from the sink or clock also closes the sink first
    """
    if duration_seconds <= 0:
        raise ValueError(f"duration must be positive, got {duration_seconds}")
    if not captions:
        raise ValueError("cannot pace an empty caption list")

    if clock is None:
        clock = TickClock()

    step = ticks_per_caption(len(captions), duration_seconds)
    _log.debug(
        "Countdown: %d ticks, %d captions, %d ticks per caption",
        duration_seconds, len(captions), step,
    )

    sink.start(total=duration_seconds)
    clock.start()
    current = 0
    try:
        for i in range(duration_seconds):
            sink.advance(1)
            if i % step == 0:
                sink.set_label(captions[min(current, len(captions) - 1)])
                current += 1
            clock.wait_for_tick(i)
    except KeyboardInterrupt:
        _log.warning("Countdown interrupted")
        sink.finish(completed=False)
        raise
    except Exception as e:
        _log.error("Countdown failed: %s", e)
        sink.finish(completed=False)
        raise

    sink.finish()
