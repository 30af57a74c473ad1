"""Last.fm implementation of the metadata source."""

from urllib.parse import urlencode

import structlog

from src.fetch.client import HttpFetcher
from src.lastfm.constants import (
    LASTFM_DEFAULT_ENDPOINT,
    LASTFM_METHOD_TRACK_INFO,
    REASON_API_ERROR,
    REASON_HTTP_STATUS,
    REASON_TRANSPORT,
)
from src.lastfm.parser import parse_playcount
from src.observability.redact import redact_url
from src.sorter.cancellation import CancellationToken
from src.sorter.errors import LookupUnavailableError
from src.sorter.models import TrackRef


logger = structlog.get_logger()


def build_track_info_url(
    api_key: str,
    artist: str,
    title: str,
    endpoint: str = LASTFM_DEFAULT_ENDPOINT,
) -> str:
    """Build a track.getInfo request URL.

    Args:
        api_key: Last.fm API key.
        artist: Artist name (URL-encoded here).
        title: Track title (URL-encoded here).
        endpoint: Web service root.

    Returns:
        Fully encoded request URL.
    """
    query = urlencode(
        {
            "method": LASTFM_METHOD_TRACK_INFO,
            "api_key": api_key,
            "artist": artist,
            "track": title,
        }
    )
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{query}"


class LastFmMetadataSource:
    """Looks up track play counts with the Last.fm track.getInfo method."""

    def __init__(
        self,
        http_client: HttpFetcher,
        api_key: str,
        endpoint: str = LASTFM_DEFAULT_ENDPOINT,
        run_id: str = "",
    ) -> None:
        """Initialize the source.

        Args:
            http_client: HTTP client for fetching.
            api_key: Last.fm API key.
            endpoint: Web service root.
            run_id: Run identifier for logging.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key:
            msg = "A Last.fm API key is required"
            raise ValueError(msg)
        self._http_client = http_client
        self._api_key = api_key
        self._endpoint = endpoint
        self._log = logger.bind(component="lastfm", run_id=run_id)

    def lookup_playcount(self, track: TrackRef, cancel: CancellationToken) -> int | None:
        """Look up the play count of a track.

        Args:
            track: Track with non-empty artist and title.
            cancel: Token observed while waiting on the network.

        Returns:
            Play count reported by Last.fm.

        Raises:
            LookupUnavailableError: On transport, HTTP, or parse failure.
            AbortedError: If cancelled while waiting.
        """
        url = build_track_info_url(
            self._api_key, track.artist, track.title, self._endpoint
        )
        self._log.debug("track_info_request", url=redact_url(url))

        result = self._http_client.fetch(url, cancel=cancel)

        if not result.received:
            message = result.error.message if result.error else "No response"
            raise LookupUnavailableError(message, reason=REASON_TRANSPORT)

        # Last.fm reports API errors as an <lfm status="failed"> body, often
        # with a 4xx status; prefer the body's message when there is one.
        if not result.is_success:
            message = f"Last.fm returned HTTP {result.status_code}"
            reason = REASON_HTTP_STATUS
            try:
                parse_playcount(result.body)
            except LookupUnavailableError as e:
                if e.reason == REASON_API_ERROR:
                    message, reason = e.message, e.reason
            raise LookupUnavailableError(
                message, reason=reason, status_code=result.status_code
            )

        return parse_playcount(result.body)
