"""Background execution of sort jobs with single-flight per playlist."""

import threading
import uuid
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

import structlog

from src.host.playlist import Playlist
from src.sorter.cancellation import CancellationToken
from src.sorter.errors import (
    AbortedError,
    HostIntegrationError,
    JobAlreadyRunningError,
)
from src.sorter.models import Ranking, TrackRef
from src.sorter.pipeline import NullProgressReporter, ProgressReporter, SortPipeline


logger = structlog.get_logger()

PipelineFactory = Callable[[str], SortPipeline]


@dataclass(frozen=True)
class SortJobResult:
    """Outcome of a background sort job.

    Attributes:
        playlist_id: Playlist the job ran against.
        run_id: Job identifier.
        ranking: Applied ranking, or None if the job did not succeed.
        aborted: Whether the job was cancelled.
        error: Error that stopped the job, if any.
    """

    playlist_id: str
    run_id: str
    ranking: Ranking | None = None
    aborted: bool = False
    error: Exception | None = None

    @property
    def success(self) -> bool:
        """Check if the ranking was produced and applied."""
        return self.ranking is not None and self.error is None


class SortJobHandle:
    """Handle to a submitted job, used to cancel or await it."""

    def __init__(
        self,
        run_id: str,
        future: "Future[SortJobResult]",
        cancel_token: CancellationToken,
    ) -> None:
        self.run_id = run_id
        self._future = future
        self._cancel_token = cancel_token

    @property
    def done(self) -> bool:
        """Check if the job has finished."""
        return self._future.done()

    def cancel(self) -> None:
        """Request cancellation; the job ends at its next suspension point."""
        self._cancel_token.cancel()

    def wait(self, timeout: float | None = None) -> SortJobResult:
        """Block until the job finishes.

        Args:
            timeout: Maximum seconds to wait.

        Returns:
            The job result.

        Raises:
            TimeoutError: If the job does not finish in time.
        """
        return self._future.result(timeout=timeout)


class BackgroundSortRunner:
    """Runs sort pipelines off the caller's thread.

    Provides:
    - One worker thread per job, so the host stays responsive
    - At most one active job per playlist
    - Splicing of the finished ranking into the playlist
    - A completion callback invoked with the job result
    """

    def __init__(
        self,
        pipeline_factory: PipelineFactory,
        max_workers: int = 2,
    ) -> None:
        """Initialize the runner.

        Args:
            pipeline_factory: Builds a pipeline for a given run id.
            max_workers: Maximum jobs running at once.
        """
        self._pipeline_factory = pipeline_factory
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="sort-job"
        )
        self._active: set[str] = set()
        self._lock = threading.Lock()
        self._log = logger.bind(component="jobs")

    @property
    def active_playlists(self) -> set[str]:
        """Get the ids of playlists with a job in flight."""
        with self._lock:
            return set(self._active)

    def submit(
        self,
        playlist: Playlist,
        on_done: Callable[[SortJobResult], None] | None = None,
        reporter: ProgressReporter | None = None,
    ) -> SortJobHandle:
        """Start sorting the playlist's selection in the background.

        The selection is captured now; the playlist is only modified if
        the job completes without cancellation.

        Args:
            playlist: Playlist whose selection is sorted.
            on_done: Called with the result when the job ends.
            reporter: Receives progress updates.

        Returns:
            Handle to the job.

        Raises:
            ValueError: If nothing is selected.
            JobAlreadyRunningError: If the playlist already has a job in flight.
        """
        tracks = playlist.selected_tracks()
        if not tracks:
            msg = f"Playlist '{playlist.playlist_id}' has no selected tracks"
            raise ValueError(msg)

        with self._lock:
            if playlist.playlist_id in self._active:
                raise JobAlreadyRunningError(playlist.playlist_id)
            self._active.add(playlist.playlist_id)

        run_id = uuid.uuid4().hex[:12]
        cancel_token = CancellationToken()
        self._log.info(
            "job_submitted",
            playlist_id=playlist.playlist_id,
            run_id=run_id,
            tracks=len(tracks),
        )

        try:
            future = self._executor.submit(
                self._run_job,
                playlist,
                tracks,
                run_id,
                cancel_token,
                reporter or NullProgressReporter(),
                on_done,
            )
        except RuntimeError:
            with self._lock:
                self._active.discard(playlist.playlist_id)
            raise
        return SortJobHandle(run_id, future, cancel_token)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs and optionally wait for running ones."""
        self._executor.shutdown(wait=wait)

    def _run_job(  # noqa: PLR0913
        self,
        playlist: Playlist,
        tracks: list[TrackRef],
        run_id: str,
        cancel_token: CancellationToken,
        reporter: ProgressReporter,
        on_done: Callable[[SortJobResult], None] | None,
    ) -> SortJobResult:
        log = self._log.bind(playlist_id=playlist.playlist_id, run_id=run_id)

        try:
            result = self._execute(playlist, tracks, run_id, cancel_token, reporter)
        finally:
            with self._lock:
                self._active.discard(playlist.playlist_id)

        log.info(
            "job_finished",
            success=result.success,
            aborted=result.aborted,
            error=str(result.error) if result.error else None,
        )

        if on_done is not None:
            try:
                on_done(result)
            except Exception as e:  # noqa: BLE001
                log.error("job_callback_error", error=str(e))

        return result

    def _execute(
        self,
        playlist: Playlist,
        tracks: list[TrackRef],
        run_id: str,
        cancel_token: CancellationToken,
        reporter: ProgressReporter,
    ) -> SortJobResult:
        playlist_id = playlist.playlist_id
        try:
            pipeline = self._pipeline_factory(run_id)
            ranking = pipeline.run(tracks, reporter, cancel_token)
        except AbortedError as e:
            return SortJobResult(playlist_id, run_id, aborted=True, error=e)
        except Exception as e:  # noqa: BLE001
            return SortJobResult(playlist_id, run_id, error=e)

        try:
            playlist.replace_selection(ranking)
        except HostIntegrationError as e:
            return SortJobResult(playlist_id, run_id, error=e)

        return SortJobResult(playlist_id, run_id, ranking=ranking)
