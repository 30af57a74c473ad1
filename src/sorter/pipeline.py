"""Playcount sort pipeline orchestrator."""

import time
import uuid
from collections.abc import Callable, Sequence
from typing import Protocol

import structlog

from src.sorter.cancellation import CancellationToken
from src.sorter.constants import COMPONENT_PIPELINE
from src.sorter.errors import AbortedError, ErrorRecord, LookupUnavailableError
from src.sorter.merger import RankedMerger
from src.sorter.metrics import SortMetrics
from src.sorter.models import (
    LookupOutcome,
    LookupStatus,
    PipelineState,
    PopularityScore,
    Ranking,
    TrackRef,
)
from src.sorter.popularity import MetadataSource, PopularityFetcher
from src.sorter.rate_limiter import (
    IntervalRateLimiter,
    RateLimitConfig,
    RateLimiterProtocol,
)
from src.sorter.state_machine import JobState, JobStateMachine


logger = structlog.get_logger()


class ProgressReporter(Protocol):
    """Receives status and progress updates while a run is in flight."""

    def set_item(self, message: str) -> None:
        """Report a human-readable status line."""
        ...

    def set_progress(self, current: int, total: int) -> None:
        """Report progress as (current, total)."""
        ...


class NullProgressReporter:
    """ProgressReporter that discards all updates."""

    def set_item(self, message: str) -> None:  # noqa: ARG002
        """Discard a status line."""

    def set_progress(self, current: int, total: int) -> None:  # noqa: ARG002
        """Discard a progress update."""


class SortPipeline:
    """Orders tracks by their play count on the metadata source.

    Implements a state machine flow:
        PENDING -> FETCHING -> RANKED -> DONE
        PENDING | FETCHING -> ABORTED

    Tracks are looked up one at a time, in input order, each behind the
    rate limiter. A failed lookup ranks its track as UNKNOWN and the run
    continues. Cancellation aborts the run and discards everything
    gathered so far.
    """

    def __init__(
        self,
        limiter: RateLimiterProtocol,
        fetcher: PopularityFetcher,
        run_id: str | None = None,
        metrics: SortMetrics | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the pipeline.

        Args:
            limiter: Rate limiter applied before every lookup.
            fetcher: Popularity fetcher for single tracks.
            run_id: Run identifier for logging and state.
            metrics: Optional metrics instance.
            clock: Monotonic clock used to time the run.
        """
        self._limiter = limiter
        self._fetcher = fetcher
        self._run_id = run_id or uuid.uuid4().hex[:12]
        self._metrics = metrics or SortMetrics.get_instance()
        self._clock = clock
        self._state_machine = JobStateMachine(self._run_id)
        self._log = logger.bind(component=COMPONENT_PIPELINE, run_id=self._run_id)

    @property
    def run_id(self) -> str:
        """Get the run identifier."""
        return self._run_id

    @property
    def state(self) -> JobState:
        """Get current job state."""
        return self._state_machine.state

    def run(
        self,
        inputs: Sequence[TrackRef],
        reporter: ProgressReporter,
        cancel: CancellationToken,
    ) -> Ranking:
        """Look up every track and return them ranked by play count.

        Args:
            inputs: Tracks in their original order.
            reporter: Receives one status line and progress update per track.
            cancel: Token checked before, during, and after each lookup.

        Returns:
            Ranking containing every input track exactly once.

        Raises:
            AbortedError: If cancellation was observed before completion.
        """
        tracks = list(inputs)
        state = PipelineState(
            run_id=self._run_id,
            total=len(tracks),
            started_at=self._clock(),
        )
        merger = RankedMerger()
        self._state_machine = JobStateMachine(self._run_id)

        self._log.info("sort_started", tracks_in=state.total)

        try:
            cancel.raise_if_cancelled()
            self._state_machine.to_fetching()

            for index, track in enumerate(tracks):
                cancel.raise_if_cancelled()
                reporter.set_item(f"Track {index + 1} of {state.total}")
                reporter.set_progress(index + 1, state.total)

                self._limiter.acquire(cancel)
                outcome = self._fetch(track, cancel)

                merger.add(index, track, outcome.score)
                state.record(outcome.status)
                cancel.raise_if_cancelled()
        except AbortedError:
            self._state_machine.to_aborted()
            self._metrics.record_run_aborted()
            self._log.info(
                "sort_aborted",
                processed=state.processed,
                remaining=state.remaining,
            )
            raise

        self._state_machine.to_ranked()
        ranking = merger.drain()
        self._state_machine.to_done()

        duration_ms = (self._clock() - state.started_at) * 1000
        self._metrics.record_run_completed(len(ranking), duration_ms)
        self._log.info(
            "sort_complete",
            tracks_out=len(ranking),
            unknown=ranking.unknown_count,
            outcomes={k.value: v for k, v in state.outcomes.items()},
            duration_ms=round(duration_ms, 2),
        )
        return ranking

    def _fetch(self, track: TrackRef, cancel: CancellationToken) -> LookupOutcome:
        """Fetch one track, degrading any non-cancellation failure."""
        try:
            return self._fetcher.fetch(track, cancel)
        except AbortedError:
            raise
        except Exception as e:  # noqa: BLE001
            self._log.warning(
                "lookup_failed_unexpectedly",
                artist=track.artist,
                title=track.title,
                error=str(e),
            )
            return LookupOutcome(
                status=LookupStatus.LOOKUP_UNAVAILABLE,
                score=PopularityScore.UNKNOWN,
                error=ErrorRecord.from_exception(
                    LookupUnavailableError(
                        f"Unexpected lookup error: {e}", reason="unexpected"
                    )
                ),
            )


def build_pipeline(
    source: MetadataSource,
    rate_limit: RateLimitConfig | None = None,
    run_id: str | None = None,
) -> SortPipeline:
    """Wire a pipeline with the default limiter and fetcher.

    Args:
        source: Metadata source to query.
        rate_limit: Pacing parameters (defaults to 5/s with cooldowns).
        run_id: Optional run identifier.

    Returns:
        Ready-to-run SortPipeline.
    """
    run_id = run_id or uuid.uuid4().hex[:12]
    limiter = IntervalRateLimiter(config=rate_limit or RateLimitConfig())
    fetcher = PopularityFetcher(source, run_id=run_id)
    return SortPipeline(limiter=limiter, fetcher=fetcher, run_id=run_id)
