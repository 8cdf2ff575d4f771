"""Deterministic object keys, content types and cache policies.

Every object a playlist produces lives under ``podcasts/{slug}/``, where the
slug is derived from the playlist title alone. Two playlists with the same
title therefore share a namespace.
"""

import hashlib
import re
from pathlib import PurePosixPath

MAX_SLUG_LENGTH = 50

# Episodes and artwork never change once published; the feed is re-fetched
MEDIA_CACHE_CONTROL = "public, max-age=31536000"
FEED_CACHE_CONTROL = "public, max-age=300"

DEFAULT_CONTENT_TYPE = "application/octet-stream"
CONTENT_TYPES = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".xml": "application/rss+xml",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}

FEED_FILENAME = "feed.xml"
ARTWORK_FILENAME = "cover.jpg"


def podcast_slug(title: str) -> str:
    """Derive the storage namespace from a playlist title.

    >>> podcast_slug("My Daily Tech News!!")
    'my-daily-tech-news'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def podcast_prefix(slug: str) -> str:
    return f"podcasts/{slug}"


def episode_key(slug: str, ordinal: int, filename: str) -> str:
    return f"{podcast_prefix(slug)}/episodes/{ordinal}-{filename}"


def artwork_key(slug: str) -> str:
    return f"{podcast_prefix(slug)}/{ARTWORK_FILENAME}"


def feed_key(slug: str) -> str:
    return f"{podcast_prefix(slug)}/{FEED_FILENAME}"


def content_type_for(name: str) -> str:
    """Map a filename or key to its MIME type by extension."""
    return CONTENT_TYPES.get(PurePosixPath(name).suffix.lower(), DEFAULT_CONTENT_TYPE)


def fallback_slug(playlist_url: str) -> str:
    """Slug for titles with no ASCII letters or digits, derived from the URL."""
    return f"podcast-{hashlib.sha1(playlist_url.encode('utf-8')).hexdigest()[:10]}"
