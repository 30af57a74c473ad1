"""Stable aggregation of scored tracks into a ranking."""

from src.sorter.models import PopularityScore, RankedEntry, Ranking, TrackRef


class RankedMerger:
    """Collects (index, track, score) entries and sorts them on drain.

    Entries may arrive in any order. The ranking is ordered by score
    descending with UNKNOWN scores last, and by original input index on
    ties, so the result does not depend on arrival order.
    """

    def __init__(self) -> None:
        """Initialize an empty merger."""
        self._entries: dict[int, RankedEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, index: int, track: TrackRef, score: PopularityScore) -> None:
        """Record the score of the track at an input position.

        Args:
            index: Original input position of the track.
            track: The track.
            score: Its popularity score.

        Raises:
            ValueError: If the index is negative or already recorded.
        """
        if index < 0:
            msg = f"Input index must be non-negative, got {index}"
            raise ValueError(msg)
        if index in self._entries:
            msg = f"Input index {index} was already recorded"
            raise ValueError(msg)
        self._entries[index] = RankedEntry(index=index, track=track, score=score)

    @property
    def known_count(self) -> int:
        """Number of entries with a known score."""
        return sum(1 for e in self._entries.values() if not e.score.is_unknown)

    @property
    def unknown_count(self) -> int:
        """Number of entries with an UNKNOWN score."""
        return len(self._entries) - self.known_count

    def drain(self) -> Ranking:
        """Sort the accumulated entries and reset the merger.

        Returns:
            Ranking sorted by score descending, input order on ties.
        """
        ordered = sorted(self._entries.values(), key=lambda e: e.sort_key)
        self._entries = {}
        return Ranking(entries=tuple(ordered))
