"""Load-phase progress reporting."""

from collections.abc import Callable

import structlog

from learn2go.models.snapshot import LoadProgress

logger = structlog.get_logger()

ProgressCallback = Callable[[LoadProgress], None]


class ProgressReporter:
    """Emits a non-decreasing percentage as preload stages finish.

    Intermediate steps are capped at 99 so only ``complete()`` reports 100.

    Args:
        total_steps: Number of stages the pipeline announces.
        callback: Receiver for each emitted signal.
    """

    def __init__(self, total_steps: int, callback: ProgressCallback | None = None):
        self.total_steps = max(1, total_steps)
        self._callback = callback
        self._current = 0
        self._last_percentage = -1

    @property
    def percentage(self) -> int:
        return max(0, self._last_percentage)

    @property
    def finished(self) -> bool:
        return self._last_percentage == 100

    def step(self, message: str) -> None:
        """Announce the start of the next stage."""
        self._current = min(self._current + 1, self.total_steps)
        percentage = min(99, round(self._current / self.total_steps * 100))
        self._emit(percentage, message)

    def complete(self, message: str = "Ready to learn!") -> None:
        """Terminate the sequence at exactly 100."""
        if self.finished:
            return
        self._current = self.total_steps
        self._emit(100, message)

    def _emit(self, percentage: int, message: str) -> None:
        percentage = max(percentage, self._last_percentage, 0)
        self._last_percentage = percentage
        logger.debug("preload_progress", percentage=percentage, message=message)
        if self._callback is None:
            return
        signal = LoadProgress(
            current=self._current,
            total=self.total_steps,
            message=message,
            percentage=percentage,
        )
        try:
            self._callback(signal)
        except Exception:
            logger.exception("progress_callback_error")
