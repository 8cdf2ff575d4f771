"""Object storage for published podcast assets."""

from tubecast.storage.keys import (
    artwork_key,
    content_type_for,
    episode_key,
    feed_key,
    podcast_slug,
)
from tubecast.storage.models import UploadedObject
from tubecast.storage.store import ObjectStore

__all__ = [
    "ObjectStore",
    "UploadedObject",
    "artwork_key",
    "content_type_for",
    "episode_key",
    "feed_key",
    "podcast_slug",
]
