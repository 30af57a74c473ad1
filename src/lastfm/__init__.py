"""Last.fm metadata source for track play counts."""

from src.lastfm.parser import parse_playcount
from src.lastfm.source import LastFmMetadataSource, build_track_info_url


__all__ = [
    "LastFmMetadataSource",
    "build_track_info_url",
    "parse_playcount",
]
