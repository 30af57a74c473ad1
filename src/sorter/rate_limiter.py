"""Request pacing for metadata lookups."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Annotated, Protocol

import structlog
from pydantic import BaseModel, ConfigDict, Field

from src.sorter.cancellation import CancellationToken, SleepOutcome
from src.sorter.constants import (
    COMPONENT_RATE_LIMITER,
    DEFAULT_COOLDOWN_EVERY,
    DEFAULT_COOLDOWN_SECONDS,
    DEFAULT_MIN_INTERVAL_SECONDS,
)
from src.sorter.errors import AbortedError


logger = structlog.get_logger()


class RateLimitConfig(BaseModel):
    """Pacing parameters for outbound lookups.

    The defaults cap lookups at 5 per second and add a 10 second pause
    after every 100 requests, keeping the average over a 5 minute window
    well below the instantaneous cap.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_interval_seconds: Annotated[float, Field(ge=0.0, le=60.0)] = (
        DEFAULT_MIN_INTERVAL_SECONDS
    )
    cooldown_every: Annotated[int, Field(ge=1)] = DEFAULT_COOLDOWN_EVERY
    cooldown_seconds: Annotated[float, Field(ge=0.0, le=3600.0)] = (
        DEFAULT_COOLDOWN_SECONDS
    )


class RateLimiterProtocol(Protocol):
    """Protocol for rate limiters.

    Allows dependency injection of rate limiter for testing.
    """

    def acquire(self, cancel: CancellationToken) -> None:
        """Block until the next request may be issued.

        Args:
            cancel: Token observed while waiting.

        Raises:
            AbortedError: If cancelled while waiting.
        """
        ...


@dataclass
class IntervalRateLimiter:
    """Minimum-interval rate limiter with a periodic cooldown.

    Each acquisition waits until min_interval has passed since the previous
    one; creating the limiter counts as the first reference point. Before
    every (cooldown_every + 1)-th acquisition an additional cooldown is
    applied on top of the interval wait.

    All waits go through CancellationToken.sleep_or_cancel so a pending
    wait ends as soon as cancellation is signalled.

    Attributes:
        config: Pacing parameters.
        clock: Monotonic clock (injectable for tests).
    """

    config: RateLimitConfig = field(default_factory=RateLimitConfig)
    clock: Callable[[], float] = time.monotonic

    _last_request_at: float = field(init=False, default=0.0)
    _requests: int = field(init=False, default=0)
    _interval_waits: int = field(init=False, default=0)
    _cooldowns: int = field(init=False, default=0)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        """Initialize the limiter state."""
        self._last_request_at = self.clock()
        self._log = logger.bind(component=COMPONENT_RATE_LIMITER)

    def acquire(self, cancel: CancellationToken) -> None:
        """Block until the next request may be issued.

        Args:
            cancel: Token observed while waiting.

        Raises:
            AbortedError: If cancelled before or while waiting.
        """
        with self._lock:
            cancel.raise_if_cancelled()

            elapsed = self.clock() - self._last_request_at
            remaining = self.config.min_interval_seconds - elapsed
            if remaining > 0:
                self._interval_waits += 1
                self._sleep(cancel, remaining)

            if self._requests and self._requests % self.config.cooldown_every == 0:
                self._cooldowns += 1
                self._log.info(
                    "rate_limit_cooldown",
                    requests=self._requests,
                    cooldown_seconds=self.config.cooldown_seconds,
                )
                self._sleep(cancel, self.config.cooldown_seconds)

            self._requests += 1
            self._last_request_at = self.clock()

    def _sleep(self, cancel: CancellationToken, duration: float) -> None:
        """Sleep through the token, converting cancellation to AbortedError."""
        if cancel.sleep_or_cancel(duration) == SleepOutcome.CANCELLED:
            self._log.info("rate_limit_wait_cancelled", requests=self._requests)
            raise AbortedError("Cancelled while waiting for rate limit")

    @property
    def request_count(self) -> int:
        """Get the number of acquisitions granted."""
        return self._requests

    @property
    def cooldown_count(self) -> int:
        """Get the number of extended cooldowns applied."""
        return self._cooldowns

    @property
    def interval_wait_count(self) -> int:
        """Get the number of acquisitions that had to wait for the interval."""
        return self._interval_waits
