"""In-memory playlist host that applies rankings to its selection."""

import threading
from collections import Counter
from collections.abc import Iterable

import structlog

from src.sorter.errors import HostIntegrationError
from src.sorter.models import Ranking, TrackRef


logger = structlog.get_logger()


class Playlist:
    """Ordered tracks plus a selection, guarded by a lock.

    A finished ranking replaces the selected tracks in one step: they are
    removed and the ranked tracks are inserted where the first selected
    track was. The inserted tracks become the new selection.
    """

    def __init__(
        self,
        playlist_id: str,
        tracks: Iterable[TrackRef],
        selection: Iterable[int] | None = None,
    ) -> None:
        """Initialize the playlist.

        Args:
            playlist_id: Identifier used for single-flight job control.
            tracks: Tracks in playlist order.
            selection: Selected positions (defaults to every track).

        Raises:
            IndexError: If a selected position is out of range.
        """
        self._playlist_id = playlist_id
        self._tracks = list(tracks)
        self._lock = threading.Lock()
        self._selection: set[int] = set()
        self.select(range(len(self._tracks)) if selection is None else selection)
        self._log = logger.bind(component="playlist", playlist_id=playlist_id)

    @property
    def playlist_id(self) -> str:
        """Get the playlist identifier."""
        return self._playlist_id

    @property
    def tracks(self) -> list[TrackRef]:
        """Get a copy of the tracks in playlist order."""
        with self._lock:
            return list(self._tracks)

    @property
    def selection(self) -> list[int]:
        """Get the selected positions in ascending order."""
        with self._lock:
            return sorted(self._selection)

    def select(self, positions: Iterable[int]) -> None:
        """Replace the selection.

        Args:
            positions: Positions to select.

        Raises:
            IndexError: If a position is out of range.
        """
        chosen = set(positions)
        with self._lock:
            for position in chosen:
                if not 0 <= position < len(self._tracks):
                    msg = f"Selection position {position} is out of range"
                    raise IndexError(msg)
            self._selection = chosen

    def selected_tracks(self) -> list[TrackRef]:
        """Get the selected tracks in playlist order."""
        with self._lock:
            return [self._tracks[i] for i in sorted(self._selection)]

    def first_selected_index(self) -> int | None:
        """Get the position of the first selected track, if any."""
        with self._lock:
            return min(self._selection) if self._selection else None

    def replace_selection(self, ranking: Ranking) -> None:
        """Replace the selected tracks with a ranking.

        Args:
            ranking: Ranking of exactly the currently selected tracks.

        Raises:
            HostIntegrationError: If nothing is selected or the ranking does
                not hold the same tracks as the selection. The playlist is
                left unchanged.
        """
        ranked = ranking.tracks
        with self._lock:
            if not self._selection:
                msg = "Cannot apply a ranking: nothing is selected"
                raise HostIntegrationError(msg)

            selected = [self._tracks[i] for i in sorted(self._selection)]
            if Counter(selected) != Counter(ranked):
                msg = "Ranking does not match the current selection"
                raise HostIntegrationError(
                    msg,
                    details={"selected": len(selected), "ranked": len(ranked)},
                )

            first = min(self._selection)
            remaining = [
                t for i, t in enumerate(self._tracks) if i not in self._selection
            ]
            self._tracks = remaining[:first] + ranked + remaining[first:]
            self._selection = set(range(first, first + len(ranked)))

        self._log.info("selection_replaced", position=first, tracks=len(ranked))
