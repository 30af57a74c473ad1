"""Result and error types of the HTTP fetch layer."""

from enum import Enum
from typing import Annotated

import httpx
from pydantic import BaseModel, ConfigDict, Field


class FetchErrorClass(str, Enum):
    """Why a fetch did not produce a usable response.

    - NETWORK_TIMEOUT: No response within the configured timeout
    - CONNECTION_ERROR: The connection could not be established
    - RESPONSE_SIZE_EXCEEDED: The body was larger than allowed
    - HTTP_4XX: Client error status other than 429
    - HTTP_5XX: Server error status
    - RATE_LIMITED: 429 Too Many Requests
    - UNKNOWN: Any other transport failure
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    RATE_LIMITED = "RATE_LIMITED"
    UNKNOWN = "UNKNOWN"


class FetchError(BaseModel):
    """Classified fetch failure."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass
    message: Annotated[str, Field(min_length=1)]
    status_code: int | None = None


def classify_status(status_code: int) -> FetchError | None:
    """Map an HTTP status to a FetchError, or None for success.

    Informational and redirect statuses that reach the caller are not
    treated as errors here; the response body decides.
    """
    if status_code == httpx.codes.TOO_MANY_REQUESTS:
        return FetchError(
            error_class=FetchErrorClass.RATE_LIMITED,
            message="Rate limited (429 Too Many Requests)",
            status_code=status_code,
        )
    if httpx.codes.is_client_error(status_code):
        return FetchError(
            error_class=FetchErrorClass.HTTP_4XX,
            message=f"Client error ({status_code})",
            status_code=status_code,
        )
    if httpx.codes.is_server_error(status_code):
        return FetchError(
            error_class=FetchErrorClass.HTTP_5XX,
            message=f"Server error ({status_code})",
            status_code=status_code,
        )
    return None


class FetchResult(BaseModel):
    """Outcome of one GET request.

    A status_code of 0 means no response was received; error then says why.
    Error statuses keep their body, since APIs often explain the failure
    there.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=0, le=599)
    url: Annotated[str, Field(min_length=1, description="Final URL after redirects")]
    body: bytes = b""
    elapsed_ms: float = Field(default=0.0, ge=0.0)
    error: FetchError | None = None

    @property
    def received(self) -> bool:
        """Check if the server answered at all."""
        return self.status_code > 0

    @property
    def is_success(self) -> bool:
        """Check for a 2xx answer without error."""
        return self.error is None and httpx.codes.is_success(self.status_code)

    @property
    def body_size(self) -> int:
        """Get the size of the body in bytes."""
        return len(self.body)
