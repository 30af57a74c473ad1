"""Structured logging and log redaction."""

from src.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    get_logger,
    redact_url_fields,
)
from src.observability.redact import redact_url


__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "get_logger",
    "redact_url",
    "redact_url_fields",
]
