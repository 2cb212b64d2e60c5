"""
Terminal progress bar for the countdown.

Renders a 20-cell bar with the current caption at the end of the line and
prints the elapsed time once the bar completes. An aborted bar is only
taken off the screen; the caller reports why.
"""

import time

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from streaming.streaming_utils import format_elapsed_time

BAR_WIDTH = 20
INITIAL_LABEL = "Booting..."


class CaptionProgress:
    """CaptionSink backed by rich.progress."""

    def __init__(self, title: str = "", console: Console | None = None):
        self.title = title
        self.console = console or Console()
        self._progress = None
        self._task_id = None
        self._started_at = None

    def start(self, total: int) -> None:
        if self.title:
            self.console.print(f"\n   {self.title}\n", markup=False)
        self._progress = Progress(
            BarColumn(bar_width=BAR_WIDTH),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("{task.description}", markup=False),
            console=self.console,
        )
        self._progress.start()
        self._task_id = self._progress.add_task(INITIAL_LABEL, total=total)
        self._started_at = time.monotonic()

    def advance(self, amount: int = 1) -> None:
        self._progress.advance(self._task_id, amount)

    def set_label(self, label: str) -> None:
        # Trailing spaces keep a shorter caption from leaving residue
        self._progress.update(self._task_id, description=label + "   ")

    def finish(self, completed: bool = True) -> None:
        if self._progress is None:
            return
        self._progress.stop()
        self._progress = None
        if completed:
            elapsed = format_elapsed_time(int(time.monotonic() - self._started_at))
            self.console.print(f"Done! ({elapsed})")

    @property
    def completed(self) -> float:
        """Units advanced so far."""
        if self._progress is None:
            return 0
        return self._progress.tasks[0].completed
