"""Configuration for the HTTP fetch layer."""

from typing import Annotated

import httpx
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_USER_AGENT = "lastsort/0.1"

# track.getInfo answers are a few KB; anything near this is not a real answer
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 1024 * 1024

DEFAULT_ACCEPT = "application/xml, text/xml;q=0.9, */*;q=0.1"


class FetchConfig(BaseModel):
    """Settings shared by every request of an HttpFetcher.

    Attributes:
        user_agent: Sent on every request; Last.fm asks clients to identify
            themselves.
        timeout_seconds: Read, write and pool timeout.
        connect_timeout_seconds: Timeout for establishing the connection.
        max_response_size_bytes: Bodies larger than this are rejected.
        accept: Accept header value.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = DEFAULT_USER_AGENT
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = 30.0
    connect_timeout_seconds: Annotated[float, Field(ge=1.0, le=60.0)] = 10.0
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )
    accept: Annotated[str, Field(min_length=1)] = DEFAULT_ACCEPT

    def timeout(self) -> httpx.Timeout:
        """Build the httpx timeout for these settings."""
        return httpx.Timeout(self.timeout_seconds, connect=self.connect_timeout_seconds)

    def request_headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        return {"User-Agent": self.user_agent, "Accept": self.accept}
