"""Unit tests for sort pipeline errors."""

from src.sorter.errors import (
    AbortedError,
    ErrorRecord,
    HostIntegrationError,
    InvalidTrackMetadataError,
    JobAlreadyRunningError,
    LookupUnavailableError,
    SortError,
    SortErrorClass,
)


class TestSortErrors:
    """Tests for the error hierarchy."""

    def test_all_errors_are_sort_errors(self) -> None:
        """Every specific error derives from SortError."""
        errors = [
            InvalidTrackMetadataError("artist"),
            LookupUnavailableError("x", reason="empty_body"),
            AbortedError(),
            HostIntegrationError("x"),
            JobAlreadyRunningError("p1"),
        ]

        assert all(isinstance(e, SortError) for e in errors)

    def test_error_classes(self) -> None:
        """Each error carries its classification."""
        assert InvalidTrackMetadataError("title").error_class == (
            SortErrorClass.INVALID_TRACK_METADATA
        )
        assert AbortedError().error_class == SortErrorClass.ABORTED
        assert HostIntegrationError("x").error_class == SortErrorClass.HOST_INTEGRATION
        assert JobAlreadyRunningError("p").error_class == (
            SortErrorClass.JOB_ALREADY_RUNNING
        )

    def test_invalid_track_message(self) -> None:
        """The message names the missing field."""
        error = InvalidTrackMetadataError("artist", track_key="/music/a.flac")

        assert str(error) == "Track has no artist"
        assert error.details == {"field": "artist", "track_key": "/music/a.flac"}

    def test_aborted_default_message(self) -> None:
        """AbortedError has a default message."""
        assert str(AbortedError()) == "Sort aborted"

    def test_to_dict(self) -> None:
        """to_dict includes class, message and details."""
        error = LookupUnavailableError("HTTP 503", reason="http_status", status_code=503)

        assert error.to_dict() == {
            "error_class": "LOOKUP_UNAVAILABLE",
            "message": "HTTP 503",
            "details": {"reason": "http_status", "status_code": 503},
        }


class TestErrorRecord:
    """Tests for ErrorRecord."""

    def test_from_exception(self) -> None:
        """ErrorRecord mirrors the exception."""
        record = ErrorRecord.from_exception(JobAlreadyRunningError("p1"))

        assert record.error_class == SortErrorClass.JOB_ALREADY_RUNNING
        assert "p1" in record.message
        assert record.details == {"playlist_id": "p1"}
