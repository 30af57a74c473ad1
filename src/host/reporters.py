"""Progress reporters for host integrations."""

import structlog


logger = structlog.get_logger()


class LoggingProgressReporter:
    """ProgressReporter that writes progress to the structured log."""

    def __init__(self, run_id: str = "") -> None:
        """Initialize the reporter.

        Args:
            run_id: Run identifier for logging.
        """
        self._log = logger.bind(component="progress", run_id=run_id)
        self._message = ""
        self._current = 0
        self._total = 0

    @property
    def message(self) -> str:
        """Get the last status line."""
        return self._message

    @property
    def progress(self) -> tuple[int, int]:
        """Get the last (current, total) pair."""
        return self._current, self._total

    def set_item(self, message: str) -> None:
        """Record a status line."""
        self._message = message

    def set_progress(self, current: int, total: int) -> None:
        """Record and log progress."""
        self._current = current
        self._total = total
        self._log.info(
            "sort_progress", message=self._message, current=current, total=total
        )
