"""Podcast feed synthesis."""

from tubecast.feed.builder import FeedBuilder, format_duration
from tubecast.feed.models import Episode, PodcastInfo

__all__ = ["Episode", "FeedBuilder", "PodcastInfo", "format_duration"]
