"""Data models for the playcount sort pipeline."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from src.sorter.errors import ErrorRecord


class TrackRef(BaseModel):
    """Immutable reference to a track supplied by the playlist host.

    Attributes:
        artist: Artist name used for the lookup.
        title: Track title used for the lookup.
        key: Opaque host identifier (file path, playlist entry id, ...).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    artist: str = Field(default="", description="Artist name")
    title: str = Field(default="", description="Track title")
    key: str | None = Field(default=None, description="Opaque host identifier")


@dataclass(frozen=True)
class PopularityScore:
    """Play count of a track, or the UNKNOWN sentinel.

    UNKNOWN is used when the lookup failed or the source has no data. It
    ranks below every known count, including an explicit zero.

    Attributes:
        count: Non-negative play count, or None when unknown.
    """

    count: int | None = None

    UNKNOWN: ClassVar["PopularityScore"]

    def __post_init__(self) -> None:
        """Validate the count."""
        if self.count is not None and self.count < 0:
            msg = f"Play count must be non-negative, got {self.count}"
            raise ValueError(msg)

    @classmethod
    def of(cls, count: int | None) -> "PopularityScore":
        """Build a score from an optional count.

        Args:
            count: Play count, or None for unknown.

        Returns:
            PopularityScore instance.
        """
        if count is None:
            return cls.UNKNOWN
        return cls(count=count)

    @property
    def is_unknown(self) -> bool:
        """Check if this is the UNKNOWN sentinel."""
        return self.count is None

    @property
    def rank_value(self) -> int:
        """Numeric value used for ranking (UNKNOWN ranks as zero)."""
        return 0 if self.count is None else self.count

    def __str__(self) -> str:
        return "unknown" if self.count is None else str(self.count)


PopularityScore.UNKNOWN = PopularityScore(count=None)


class LookupStatus(str, Enum):
    """Outcome classification of a single popularity lookup."""

    OK = "OK"
    INVALID_TRACK_METADATA = "INVALID_TRACK_METADATA"
    LOOKUP_UNAVAILABLE = "LOOKUP_UNAVAILABLE"


@dataclass(frozen=True)
class LookupOutcome:
    """Result of fetching the popularity of one track.

    Attributes:
        status: Outcome classification.
        score: Score to rank with (UNKNOWN unless status is OK).
        error: Error record for degraded outcomes.
    """

    status: LookupStatus
    score: PopularityScore = PopularityScore.UNKNOWN
    error: ErrorRecord | None = None

    @property
    def is_ok(self) -> bool:
        """Check if the lookup succeeded."""
        return self.status == LookupStatus.OK

    @classmethod
    def ok(cls, score: PopularityScore) -> "LookupOutcome":
        """Build a successful outcome."""
        return cls(status=LookupStatus.OK, score=score)


@dataclass(frozen=True)
class RankedEntry:
    """A track paired with its score and original input position.

    Attributes:
        index: Position of the track in the input sequence.
        track: The track.
        score: Its popularity score.
    """

    index: int
    track: TrackRef
    score: PopularityScore

    @property
    def sort_key(self) -> tuple[bool, int, int]:
        """Key ordering known scores first, descending, then by input index."""
        return (self.score.is_unknown, -self.score.rank_value, self.index)


@dataclass(frozen=True)
class Ranking:
    """Ordered result of a sort run.

    Attributes:
        entries: Entries sorted by score descending, input order on ties.
    """

    entries: tuple[RankedEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[RankedEntry]:
        return iter(self.entries)

    @property
    def tracks(self) -> list[TrackRef]:
        """Tracks in ranked order."""
        return [entry.track for entry in self.entries]

    @property
    def unknown_count(self) -> int:
        """Number of entries ranked without a known score."""
        return sum(1 for entry in self.entries if entry.score.is_unknown)


@dataclass
class PipelineState:
    """Mutable state scoped to one pipeline invocation.

    Attributes:
        run_id: Identifier of the invocation.
        total: Number of input tracks.
        processed: Number of tracks looked up so far.
        started_at: Monotonic timestamp when the run started.
        outcomes: Count of lookups by status.
    """

    run_id: str
    total: int
    processed: int = 0
    started_at: float = 0.0
    outcomes: dict[LookupStatus, int] = field(default_factory=dict)

    @property
    def remaining(self) -> int:
        """Number of tracks not yet looked up."""
        return self.total - self.processed

    def record(self, status: LookupStatus) -> None:
        """Record the outcome of one lookup.

        Args:
            status: Outcome classification.
        """
        self.processed += 1
        self.outcomes[status] = self.outcomes.get(status, 0) + 1
