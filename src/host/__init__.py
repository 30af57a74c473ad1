"""Playlist host integration for the sort pipeline."""

from src.host.jobs import BackgroundSortRunner, SortJobHandle, SortJobResult
from src.host.playlist import Playlist
from src.host.reporters import LoggingProgressReporter


__all__ = [
    "BackgroundSortRunner",
    "LoggingProgressReporter",
    "Playlist",
    "SortJobHandle",
    "SortJobResult",
]
