"""Error types for the playcount sort pipeline."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class SortErrorClass(str, Enum):
    """Classification of sort pipeline errors.

    - INVALID_TRACK_METADATA: Track lacks artist or title, never looked up
    - LOOKUP_UNAVAILABLE: Transport or parse failure for one track
    - ABORTED: Cancellation observed, the run produced no ranking
    - HOST_INTEGRATION: The host failed to apply a finished ranking
    - JOB_ALREADY_RUNNING: A job for the same playlist is still active
    """

    INVALID_TRACK_METADATA = "INVALID_TRACK_METADATA"
    LOOKUP_UNAVAILABLE = "LOOKUP_UNAVAILABLE"
    ABORTED = "ABORTED"
    HOST_INTEGRATION = "HOST_INTEGRATION"
    JOB_ALREADY_RUNNING = "JOB_ALREADY_RUNNING"


class SortError(Exception):
    """Base exception for sort pipeline errors.

    Provides structured error information for logging and status reporting.
    """

    error_class: SortErrorClass = SortErrorClass.LOOKUP_UNAVAILABLE

    def __init__(
        self,
        message: str,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the sort error.

        Args:
            message: Human-readable error message.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidTrackMetadataError(SortError):
    """Track is missing the artist or title needed for a lookup."""

    error_class = SortErrorClass.INVALID_TRACK_METADATA

    def __init__(self, missing_field: str, track_key: str | None = None) -> None:
        """Initialize the error.

        Args:
            missing_field: Name of the empty field.
            track_key: Host key of the track, if any.
        """
        super().__init__(
            f"Track has no {missing_field}",
            details={"field": missing_field, "track_key": track_key},
        )
        self.missing_field = missing_field


class LookupUnavailableError(SortError):
    """The metadata source could not provide a playcount.

    Raised for network failures, HTTP errors, empty or malformed bodies,
    and responses without a usable playcount.
    """

    error_class = SortErrorClass.LOOKUP_UNAVAILABLE

    def __init__(
        self,
        message: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            reason: Short machine-readable reason (e.g. 'empty_body').
            status_code: HTTP status code if one was received.
        """
        super().__init__(
            message,
            details={"reason": reason, "status_code": status_code},
        )
        self.reason = reason
        self.status_code = status_code


class AbortedError(SortError):
    """Cancellation was observed; no ranking is produced."""

    error_class = SortErrorClass.ABORTED

    def __init__(self, message: str = "Sort aborted") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class HostIntegrationError(SortError):
    """The playlist host could not apply a ranking."""

    error_class = SortErrorClass.HOST_INTEGRATION


class JobAlreadyRunningError(SortError):
    """A sort job for the same playlist is still in flight."""

    error_class = SortErrorClass.JOB_ALREADY_RUNNING

    def __init__(self, playlist_id: str) -> None:
        """Initialize the error.

        Args:
            playlist_id: Identifier of the busy playlist.
        """
        super().__init__(
            f"A sort job is already running for playlist '{playlist_id}'",
            details={"playlist_id": playlist_id},
        )
        self.playlist_id = playlist_id


class ErrorRecord(BaseModel):
    """Serializable record of a per-item failure."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: SortErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    details: dict[str, str | int | bool | None] = Field(
        default_factory=dict, description="Additional error details"
    )

    @classmethod
    def from_exception(cls, error: SortError) -> "ErrorRecord":
        """Create an ErrorRecord from a SortError exception.

        Args:
            error: The exception to convert.

        Returns:
            ErrorRecord instance.
        """
        return cls(
            error_class=error.error_class,
            message=error.message,
            details=error.details,
        )
