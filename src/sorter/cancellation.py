"""Cooperative cancellation shared by the pipeline and its collaborators."""

import threading
from enum import Enum

from src.sorter.errors import AbortedError


class SleepOutcome(str, Enum):
    """Result of a cancellable sleep."""

    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class CancellationToken:
    """Thread-safe cancellation flag with a cancellable sleep.

    The host calls cancel() from its own thread; the worker observes it at
    every suspension point through sleep_or_cancel() or raise_if_cancelled().
    """

    def __init__(self) -> None:
        """Initialize an uncancelled token."""
        self._event = threading.Event()

    def cancel(self) -> None:
        """Signal cancellation and wake any pending sleep."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """Check whether cancellation was signalled."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise AbortedError if cancellation was signalled.

        Raises:
            AbortedError: If the token is cancelled.
        """
        if self._event.is_set():
            raise AbortedError

    def sleep_or_cancel(self, duration: float) -> SleepOutcome:
        """Sleep for a duration unless cancelled first.

        Args:
            duration: Seconds to sleep.

        Returns:
            COMPLETED if the full duration elapsed, CANCELLED otherwise.
        """
        if duration <= 0:
            return SleepOutcome.CANCELLED if self.is_cancelled() else SleepOutcome.COMPLETED
        if self._event.wait(timeout=duration):
            return SleepOutcome.CANCELLED
        return SleepOutcome.COMPLETED
