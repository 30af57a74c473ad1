"""CLI commands for sorting playlists by Last.fm play count."""

import json
import logging
import sys
import time
from pathlib import Path

import click
import structlog
from pydantic import TypeAdapter, ValidationError

from src.fetch.client import HttpFetcher
from src.fetch.config import FetchConfig
from src.fetch.metrics import FetchMetrics
from src.host.jobs import BackgroundSortRunner, SortJobHandle, SortJobResult
from src.host.playlist import Playlist
from src.host.reporters import LoggingProgressReporter
from src.lastfm.source import LastFmMetadataSource
from src.observability.logging import bind_run_context, configure_logging
from src.settings import AppSettings, get_settings
from src.sorter.metrics import SortMetrics
from src.sorter.models import TrackRef
from src.sorter.pipeline import SortPipeline, build_pipeline
from src.sorter.popularity import MetadataSource
from src.sorter.rate_limiter import RateLimitConfig


logger = structlog.get_logger()

EXIT_INPUT_ERROR = 2
EXIT_JOB_FAILED = 1
EXIT_ABORTED = 130

# How often the main thread wakes up while waiting, so Ctrl-C is noticed
WAIT_POLL_SECONDS = 0.5

_TRACK_LIST = TypeAdapter(list[TrackRef])


def load_playlist_file(path: Path) -> list[TrackRef]:
    """Load tracks from a JSON playlist file.

    Args:
        path: File holding a JSON list of {"artist", "title", "key"?} objects.

    Returns:
        Tracks in file order.

    Raises:
        ValueError: If the file is not valid JSON or not a list of tracks.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"{path}: invalid JSON ({e})"
        raise ValueError(msg) from e

    try:
        return _TRACK_LIST.validate_python(data)
    except ValidationError as e:
        msg = f"{path}: not a list of tracks ({e.error_count()} errors)"
        raise ValueError(msg) from e


def dump_tracks(tracks: list[TrackRef]) -> str:
    """Serialize tracks to the playlist file format."""
    payload = [t.model_dump(exclude_none=True) for t in tracks]
    return json.dumps(payload, ensure_ascii=False, indent=2)


def build_metadata_source(settings: AppSettings, http_client: HttpFetcher) -> MetadataSource:
    """Create the Last.fm metadata source from settings.

    Raises:
        ValueError: If no API key is configured.
    """
    return LastFmMetadataSource(
        http_client=http_client,
        api_key=settings.lastfm_api_key or "",
        endpoint=settings.lastfm_endpoint,
    )


def _wait_for(handle: SortJobHandle) -> SortJobResult:
    """Wait for a job, cancelling it on Ctrl-C."""
    try:
        while not handle.done:
            time.sleep(WAIT_POLL_SECONDS)
    except KeyboardInterrupt:
        click.echo("Cancelling...", err=True)
        handle.cancel()
    return handle.wait()


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Sort playlists by Last.fm play count."""


@cli.command()
@click.argument(
    "playlist_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--start",
    type=click.IntRange(min=0),
    default=0,
    help="First position of the selection to sort (default: 0).",
)
@click.option(
    "--end",
    type=click.IntRange(min=0),
    default=None,
    help="Position after the last selected track (default: end of playlist).",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the sorted playlist here instead of stdout.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs (default: true).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def sort(  # noqa: PLR0913
    playlist_path: Path,
    start: int,
    end: int | None,
    output_path: Path | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Sort the tracks of PLAYLIST_PATH by Last.fm play count.

    The selected range is replaced in place by its sorted order; tracks
    outside it keep their positions. Tracks without a known play count
    go to the end of the range. Ctrl-C cancels without writing anything.
    """
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO, json_format=json_logs
    )

    try:
        tracks = load_playlist_file(playlist_path)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_INPUT_ERROR)

    end = len(tracks) if end is None else min(end, len(tracks))
    if start >= end:
        click.echo("Error: the selection is empty", err=True)
        sys.exit(EXIT_INPUT_ERROR)

    settings = get_settings()
    fetch_config = FetchConfig(
        user_agent=settings.user_agent,
        timeout_seconds=settings.lastfm_timeout_seconds,
    )
    rate_limit = RateLimitConfig(
        min_interval_seconds=settings.min_interval_seconds,
        cooldown_every=settings.cooldown_every,
        cooldown_seconds=settings.cooldown_seconds,
    )

    with HttpFetcher(fetch_config) as http_client:
        try:
            source = build_metadata_source(settings, http_client)
        except ValueError as e:
            click.echo(f"Error: {e} (set LASTFM_API_KEY)", err=True)
            sys.exit(EXIT_INPUT_ERROR)

        def make_pipeline(run_id: str) -> SortPipeline:
            bind_run_context(run_id)
            return build_pipeline(source, rate_limit=rate_limit, run_id=run_id)

        playlist = Playlist(
            playlist_id=str(playlist_path.resolve()),
            tracks=tracks,
            selection=range(start, end),
        )
        runner = BackgroundSortRunner(make_pipeline, max_workers=1)
        try:
            handle = runner.submit(playlist, reporter=LoggingProgressReporter())
            result = _wait_for(handle)
        finally:
            runner.shutdown(wait=True)

    fetch_metrics = FetchMetrics.get_instance()
    logger.info(
        "run_metrics",
        sort=SortMetrics.get_instance().to_dict(),
        fetch=fetch_metrics.to_dict(),
        avg_fetch_ms=round(fetch_metrics.avg_duration_ms, 2),
    )

    if result.aborted:
        click.echo("Sort cancelled; playlist left unchanged.", err=True)
        sys.exit(EXIT_ABORTED)
    if not result.success:
        click.echo(f"Error: {result.error}", err=True)
        sys.exit(EXIT_JOB_FAILED)

    output = dump_tracks(playlist.tracks)
    if output_path is None:
        click.echo(output)
    else:
        output_path.write_text(output + "\n", encoding="utf-8")

    ranking = result.ranking
    unknown = ranking.unknown_count if ranking is not None else 0
    click.echo(
        f"Sorted {end - start} tracks ({unknown} without a play count).", err=True
    )


if __name__ == "__main__":
    cli()
