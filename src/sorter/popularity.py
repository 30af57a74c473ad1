"""Per-track popularity lookup with error classification."""

from typing import Protocol

import structlog

from src.sorter.cancellation import CancellationToken
from src.sorter.constants import COMPONENT_POPULARITY
from src.sorter.errors import (
    ErrorRecord,
    InvalidTrackMetadataError,
    LookupUnavailableError,
)
from src.sorter.metrics import SortMetrics
from src.sorter.models import LookupOutcome, LookupStatus, PopularityScore, TrackRef


logger = structlog.get_logger()


class MetadataSource(Protocol):
    """Protocol for services that report a track's play count."""

    def lookup_playcount(self, track: TrackRef, cancel: CancellationToken) -> int | None:
        """Look up the play count of a track.

        Args:
            track: Track with non-empty artist and title.
            cancel: Token observed while waiting on the network.

        Returns:
            Play count, or None if the source has no data.

        Raises:
            LookupUnavailableError: On transport or parse failure.
            AbortedError: If cancelled while waiting.
        """
        ...


def validate_track(track: TrackRef) -> None:
    """Check that a track carries the fields needed for a lookup.

    Args:
        track: Track to validate.

    Raises:
        InvalidTrackMetadataError: If artist or title is empty.
    """
    if not track.artist.strip():
        raise InvalidTrackMetadataError("artist", track.key)
    if not track.title.strip():
        raise InvalidTrackMetadataError("title", track.key)


class PopularityFetcher:
    """Wraps one metadata lookup and classifies its outcome.

    Invalid tracks fail fast without a network call. Transport and parse
    failures degrade to an UNKNOWN score. Cancellation (AbortedError) is
    never caught here.
    """

    def __init__(
        self,
        source: MetadataSource,
        run_id: str = "",
        metrics: SortMetrics | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            source: Metadata source to query.
            run_id: Run identifier for logging.
            metrics: Optional metrics instance.
        """
        self._source = source
        self._metrics = metrics or SortMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_POPULARITY, run_id=run_id)

    def fetch(self, track: TrackRef, cancel: CancellationToken) -> LookupOutcome:
        """Fetch the popularity score of a track.

        Args:
            track: Track to look up.
            cancel: Token observed during the lookup.

        Returns:
            LookupOutcome with the score or the reason it is unknown.

        Raises:
            AbortedError: If cancelled during the lookup.
        """
        log = self._log.bind(artist=track.artist, title=track.title)

        try:
            validate_track(track)
        except InvalidTrackMetadataError as e:
            log.warning("lookup_skipped", reason=e.message)
            return self._degraded(LookupStatus.INVALID_TRACK_METADATA, e)

        try:
            count = self._source.lookup_playcount(track, cancel)
        except LookupUnavailableError as e:
            log.warning("lookup_degraded", reason=e.reason, error=e.message)
            return self._degraded(LookupStatus.LOOKUP_UNAVAILABLE, e)

        if count is None or count < 0:
            error = LookupUnavailableError(
                "Metadata source has no playcount for this track",
                reason="no_data",
            )
            log.info("lookup_degraded", reason=error.reason)
            return self._degraded(LookupStatus.LOOKUP_UNAVAILABLE, error)

        self._metrics.record_lookup(LookupStatus.OK)
        log.info("lookup_complete", playcount=count)
        return LookupOutcome.ok(PopularityScore(count=count))

    def _degraded(
        self,
        status: LookupStatus,
        error: InvalidTrackMetadataError | LookupUnavailableError,
    ) -> LookupOutcome:
        self._metrics.record_lookup(status)
        return LookupOutcome(
            status=status,
            score=PopularityScore.UNKNOWN,
            error=ErrorRecord.from_exception(error),
        )
