"""Counters for the HTTP fetch layer."""

import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import ClassVar

from src.fetch.models import FetchErrorClass


@dataclass
class FetchMetrics:
    """Request, failure and cancellation counters.

    Requests run on worker threads, so every update takes the lock. Use
    get_instance() for the process-wide instance.
    """

    responses_by_status: Counter[int] = field(default_factory=Counter)
    failures_by_class: Counter[str] = field(default_factory=Counter)
    requests: int = 0
    cancelled: int = 0
    bytes_received: int = 0
    duration_ms_total: float = 0.0

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    _instance: ClassVar["FetchMetrics | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get the shared instance."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance (for testing)."""
        with cls._instance_lock:
            cls._instance = None

    def record_request(self, duration_ms: float) -> None:
        """Record a request that ran to completion or failure."""
        with self._lock:
            self.requests += 1
            self.duration_ms_total += duration_ms

    def record_response(self, status_code: int, bytes_received: int) -> None:
        """Record a response received from the server."""
        with self._lock:
            self.responses_by_status[status_code] += 1
            self.bytes_received += bytes_received

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a classified failure."""
        with self._lock:
            self.failures_by_class[error_class.value] += 1

    def record_cancelled(self) -> None:
        """Record a request the caller stopped waiting for."""
        with self._lock:
            self.cancelled += 1

    @property
    def avg_duration_ms(self) -> float:
        """Mean duration of completed requests."""
        with self._lock:
            return self.duration_ms_total / self.requests if self.requests else 0.0

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Snapshot the counters."""
        with self._lock:
            return {
                "requests": self.requests,
                "responses_by_status": dict(self.responses_by_status),
                "failures_by_class": dict(self.failures_by_class),
                "cancelled": self.cancelled,
                "bytes_received": self.bytes_received,
                "duration_ms_total": self.duration_ms_total,
            }
