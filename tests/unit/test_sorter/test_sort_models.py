"""Unit tests for sort pipeline models."""

import pytest
from pydantic import ValidationError

from src.sorter.errors import ErrorRecord, LookupUnavailableError
from src.sorter.models import (
    LookupOutcome,
    LookupStatus,
    PipelineState,
    PopularityScore,
    RankedEntry,
    Ranking,
    TrackRef,
)


class TestTrackRef:
    """Tests for TrackRef."""

    def test_defaults(self) -> None:
        """Artist and title default to empty strings."""
        track = TrackRef()

        assert track.artist == ""
        assert track.title == ""
        assert track.key is None

    def test_is_frozen(self) -> None:
        """TrackRef is immutable."""
        track = TrackRef(artist="Low", title="Words")

        with pytest.raises(ValidationError):
            track.title = "Other"  # type: ignore[misc]

    def test_rejects_unknown_fields(self) -> None:
        """Extra fields are forbidden."""
        with pytest.raises(ValidationError):
            TrackRef(artist="Low", title="Words", album="Things")  # type: ignore[call-arg]

    def test_equal_tracks(self) -> None:
        """Tracks with the same fields compare equal."""
        assert TrackRef(artist="Low", title="Words") == TrackRef(
            artist="Low", title="Words"
        )


class TestPopularityScore:
    """Tests for PopularityScore."""

    def test_unknown_sentinel(self) -> None:
        """UNKNOWN has no count and ranks as zero."""
        assert PopularityScore.UNKNOWN.is_unknown
        assert PopularityScore.UNKNOWN.rank_value == 0
        assert str(PopularityScore.UNKNOWN) == "unknown"

    def test_of(self) -> None:
        """of() maps None to UNKNOWN and ints to known scores."""
        assert PopularityScore.of(None) is PopularityScore.UNKNOWN
        assert PopularityScore.of(12) == PopularityScore(count=12)
        assert str(PopularityScore.of(12)) == "12"

    def test_zero_is_known(self) -> None:
        """A zero count is distinct from UNKNOWN."""
        zero = PopularityScore.of(0)

        assert not zero.is_unknown
        assert zero != PopularityScore.UNKNOWN

    def test_negative_rejected(self) -> None:
        """Negative counts are invalid."""
        with pytest.raises(ValueError, match="non-negative"):
            PopularityScore(count=-1)


class TestLookupOutcome:
    """Tests for LookupOutcome."""

    def test_ok(self) -> None:
        """ok() builds a successful outcome."""
        outcome = LookupOutcome.ok(PopularityScore(count=3))

        assert outcome.is_ok
        assert outcome.status == LookupStatus.OK
        assert outcome.error is None

    def test_degraded_defaults_to_unknown(self) -> None:
        """A degraded outcome carries the UNKNOWN score by default."""
        error = ErrorRecord.from_exception(
            LookupUnavailableError("no body", reason="empty_body")
        )
        outcome = LookupOutcome(status=LookupStatus.LOOKUP_UNAVAILABLE, error=error)

        assert not outcome.is_ok
        assert outcome.score is PopularityScore.UNKNOWN


class TestRanking:
    """Tests for RankedEntry and Ranking."""

    def test_sort_key_orders_unknown_last(self) -> None:
        """Known scores sort before UNKNOWN, regardless of index."""
        track = TrackRef(artist="A", title="B")
        unknown = RankedEntry(0, track, PopularityScore.UNKNOWN)
        zero = RankedEntry(5, track, PopularityScore(count=0))

        assert zero.sort_key < unknown.sort_key

    def test_ranking_views(self) -> None:
        """Ranking exposes tracks in order and counts unknowns."""
        a = TrackRef(artist="X", title="A")
        b = TrackRef(artist="X", title="B")
        ranking = Ranking(
            entries=(
                RankedEntry(1, b, PopularityScore(count=2)),
                RankedEntry(0, a, PopularityScore.UNKNOWN),
            )
        )

        assert len(ranking) == 2
        assert ranking.tracks == [b, a]
        assert ranking.unknown_count == 1
        assert [e.index for e in ranking] == [1, 0]


class TestPipelineState:
    """Tests for PipelineState."""

    def test_record(self) -> None:
        """record() counts processed tracks by status."""
        state = PipelineState(run_id="r", total=3)

        state.record(LookupStatus.OK)
        state.record(LookupStatus.OK)

        assert state.processed == 2
        assert state.remaining == 1
        assert state.outcomes == {LookupStatus.OK: 2}
