"""Metrics collection for the sort pipeline."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock

from src.sorter.models import LookupStatus


# Module-level singleton state
_metrics_instance: "SortMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class SortMetrics:
    """Thread-safe metrics for sort runs.

    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    lookups_by_status: Counter[str] = field(default_factory=Counter)
    runs_completed: int = 0
    runs_aborted: int = 0
    tracks_ranked: int = 0
    run_duration_ms_total: float = 0.0

    @classmethod
    def get_instance(cls) -> "SortMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared SortMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_lookup(self, status: LookupStatus) -> None:
        """Record the outcome of one lookup.

        Args:
            status: Outcome classification.
        """
        with self._lock:
            self.lookups_by_status[status.value] += 1

    def record_run_completed(self, tracks: int, duration_ms: float) -> None:
        """Record a run that produced a ranking.

        Args:
            tracks: Number of tracks ranked.
            duration_ms: Run duration in milliseconds.
        """
        with self._lock:
            self.runs_completed += 1
            self.tracks_ranked += tracks
            self.run_duration_ms_total += duration_ms

    def record_run_aborted(self) -> None:
        """Record a run that was cancelled."""
        with self._lock:
            self.runs_aborted += 1

    def get_lookup_count(self, status: LookupStatus | None = None) -> int:
        """Get the number of lookups, optionally filtered by status.

        Args:
            status: Optional status to filter by.

        Returns:
            Lookup count.
        """
        with self._lock:
            if status is None:
                return sum(self.lookups_by_status.values())
            return self.lookups_by_status[status.value]

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "lookups_by_status": dict(self.lookups_by_status),
                "runs_completed": self.runs_completed,
                "runs_aborted": self.runs_aborted,
                "tracks_ranked": self.tracks_ranked,
                "run_duration_ms_total": self.run_duration_ms_total,
            }
