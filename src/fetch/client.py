"""Cancellable HTTP GET client."""

import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from types import TracebackType

import httpx
import structlog

from src.fetch.config import FetchConfig
from src.fetch.constants import (
    CANCEL_POLL_INTERVAL_SECONDS,
    STREAM_CHUNK_SIZE,
    WORKER_THREAD_NAME,
)
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchError, FetchErrorClass, FetchResult, classify_status
from src.observability.redact import redact_url
from src.sorter.cancellation import CancellationToken
from src.sorter.errors import AbortedError


logger = structlog.get_logger()


class ResponseSizeExceededError(Exception):
    """Raised while streaming a body that is larger than allowed."""

    def __init__(self, limit: int, read: int) -> None:
        super().__init__(f"Response exceeded {limit} bytes (read {read})")
        self.limit = limit
        self.read = read


class HttpFetcher:
    """HTTP GET client whose waits observe a cancellation token.

    httpx calls block, so each request runs on a daemon worker thread while
    the caller polls its CancellationToken. On cancellation the caller gets
    AbortedError at once. The abandoned request is discarded and never
    keeps the interpreter alive at exit.

    Transport failures and HTTP error statuses are returned as a classified
    FetchResult rather than raised. Only cancellation raises.

    Usable as a context manager; close() closes the connection pool.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        run_id: str = "",
        transport: httpx.BaseTransport | None = None,
        metrics: FetchMetrics | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Fetch configuration.
            run_id: Run identifier for logging.
            transport: Optional httpx transport (e.g. httpx.MockTransport).
            metrics: Optional metrics instance.
        """
        self._config = config or FetchConfig()
        self._metrics = metrics or FetchMetrics.get_instance()
        self._client = httpx.Client(
            timeout=self._config.timeout(),
            headers=self._config.request_headers(),
            follow_redirects=True,
            transport=transport,
        )
        self._log = logger.bind(component="fetch", run_id=run_id)

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection pool."""
        self._client.close()

    def fetch(
        self,
        url: str,
        cancel: CancellationToken | None = None,
    ) -> FetchResult:
        """GET a URL.

        Args:
            url: URL to fetch.
            cancel: Token polled while waiting for the response.

        Returns:
            FetchResult; check error / is_success.

        Raises:
            AbortedError: If cancelled before or while waiting.
        """
        log = self._log.bind(url=redact_url(url))
        if cancel is not None:
            cancel.raise_if_cancelled()

        future: "Future[FetchResult]" = Future()
        threading.Thread(
            target=self._run, args=(future, url), name=WORKER_THREAD_NAME, daemon=True
        ).start()
        result = self._wait(future, cancel, log)

        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)
        log.debug(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            elapsed_ms=round(result.elapsed_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    def _wait(
        self,
        future: "Future[FetchResult]",
        cancel: CancellationToken | None,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult:
        if cancel is None:
            return future.result()

        while True:
            try:
                return future.result(timeout=CANCEL_POLL_INTERVAL_SECONDS)
            except FutureTimeoutError:
                if cancel.is_cancelled():
                    self._metrics.record_cancelled()
                    log.info("fetch_cancelled")
                    raise AbortedError("Cancelled while waiting for response") from None

    def _run(self, future: "Future[FetchResult]", url: str) -> None:
        future.set_result(self._get(url))

    def _get(self, url: str) -> FetchResult:
        """Run one request on the worker thread."""
        started = time.perf_counter()
        try:
            result = self._stream(url, started)
        except ResponseSizeExceededError as e:
            result = self._failed(url, FetchErrorClass.RESPONSE_SIZE_EXCEEDED, str(e), started)
        except httpx.TimeoutException as e:
            result = self._failed(
                url, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {e}", started
            )
        except httpx.ConnectError as e:
            result = self._failed(
                url, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {e}", started
            )
        except Exception as e:  # noqa: BLE001
            result = self._failed(
                url, FetchErrorClass.UNKNOWN, f"Unexpected error: {e}", started
            )

        self._metrics.record_request(result.elapsed_ms)
        return result

    def _stream(self, url: str, started: float) -> FetchResult:
        with self._client.stream("GET", url) as response:
            body = self._read_limited(response)
            self._metrics.record_response(response.status_code, len(body))
            return FetchResult(
                status_code=response.status_code,
                url=str(response.url),
                body=body,
                elapsed_ms=_elapsed_ms(started),
                error=classify_status(response.status_code),
            )

    def _read_limited(self, response: httpx.Response) -> bytes:
        limit = self._config.max_response_size_bytes
        declared = response.headers.get("Content-Length")
        if declared is not None and declared.isdigit() and int(declared) > limit:
            raise ResponseSizeExceededError(limit, int(declared))

        chunks: list[bytes] = []
        read = 0
        for chunk in response.iter_bytes(chunk_size=STREAM_CHUNK_SIZE):
            read += len(chunk)
            if read > limit:
                raise ResponseSizeExceededError(limit, read)
            chunks.append(chunk)
        return b"".join(chunks)

    def _failed(
        self,
        url: str,
        error_class: FetchErrorClass,
        message: str,
        started: float,
    ) -> FetchResult:
        return FetchResult(
            status_code=0,
            url=url,
            elapsed_ms=_elapsed_ms(started),
            error=FetchError(error_class=error_class, message=message),
        )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
