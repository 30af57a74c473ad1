"""Playcount sort pipeline.

Re-orders tracks by their play count on a metadata service while pacing
outbound lookups, tolerating per-track failures, and honouring
cooperative cancellation.
"""

from src.sorter.cancellation import CancellationToken, SleepOutcome
from src.sorter.errors import (
    AbortedError,
    ErrorRecord,
    HostIntegrationError,
    InvalidTrackMetadataError,
    JobAlreadyRunningError,
    LookupUnavailableError,
    SortError,
    SortErrorClass,
)
from src.sorter.merger import RankedMerger
from src.sorter.metrics import SortMetrics
from src.sorter.models import (
    LookupOutcome,
    LookupStatus,
    PipelineState,
    PopularityScore,
    RankedEntry,
    Ranking,
    TrackRef,
)
from src.sorter.pipeline import (
    NullProgressReporter,
    ProgressReporter,
    SortPipeline,
    build_pipeline,
)
from src.sorter.popularity import MetadataSource, PopularityFetcher, validate_track
from src.sorter.rate_limiter import (
    IntervalRateLimiter,
    RateLimitConfig,
    RateLimiterProtocol,
)
from src.sorter.state_machine import JobState, JobStateMachine, JobStateTransitionError


__all__ = [
    "AbortedError",
    "CancellationToken",
    "ErrorRecord",
    "HostIntegrationError",
    "IntervalRateLimiter",
    "InvalidTrackMetadataError",
    "JobAlreadyRunningError",
    "JobState",
    "JobStateMachine",
    "JobStateTransitionError",
    "LookupOutcome",
    "LookupStatus",
    "LookupUnavailableError",
    "MetadataSource",
    "NullProgressReporter",
    "PipelineState",
    "PopularityFetcher",
    "PopularityScore",
    "ProgressReporter",
    "RankedEntry",
    "RankedMerger",
    "RateLimitConfig",
    "RateLimiterProtocol",
    "Ranking",
    "SleepOutcome",
    "SortError",
    "SortErrorClass",
    "SortMetrics",
    "SortPipeline",
    "TrackRef",
    "build_pipeline",
    "validate_track",
]
