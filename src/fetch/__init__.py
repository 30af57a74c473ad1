"""Cancellable HTTP GET layer used by metadata sources."""

from src.fetch.client import HttpFetcher, ResponseSizeExceededError
from src.fetch.config import FetchConfig
from src.fetch.metrics import FetchMetrics
from src.fetch.models import FetchError, FetchErrorClass, FetchResult, classify_status


__all__ = [
    "FetchConfig",
    "FetchError",
    "FetchErrorClass",
    "FetchMetrics",
    "FetchResult",
    "HttpFetcher",
    "ResponseSizeExceededError",
    "classify_status",
]
