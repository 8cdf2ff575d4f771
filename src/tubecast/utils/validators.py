"""Input validation for playlist URLs, filenames and storage settings.

All checks are pure functions. The ``validate_*`` functions return a bool;
``ensure_playlist_url`` raises :class:`ValidationError` for use at the edges.
"""

import re
from urllib.parse import parse_qs, urlparse

from tubecast.utils.errors import ValidationError

YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "music.youtube.com")
SHORT_HOST = "youtu.be"

# UTF-8 bytes; leaves room for the ordinal prefix and ".source.<ext>" under NAME_MAX
MAX_FILENAME_BYTES = 200

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')
_BUCKET_NAME = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")


def _truncate_utf8(text: str, max_bytes: int) -> str:
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def sanitize_filename(filename: str) -> str:
    """Make a title safe for use as a local filename and object key segment.

    Whitespace runs collapse to a single underscore, remaining reserved and
    control characters become underscores, leading and trailing dots are
    removed, and the result is capped at 200 bytes of UTF-8 without
    splitting a character.
    """
    cleaned = re.sub(r"\s+", "_", filename)
    cleaned = _INVALID_FILENAME_CHARS.sub("_", cleaned)
    cleaned = cleaned.strip(".")
    cleaned = _truncate_utf8(cleaned, MAX_FILENAME_BYTES)
    return cleaned or "untitled"


def validate_playlist_url(url: str) -> bool:
    """Check that ``url`` is an https YouTube playlist, video or short link."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False

    if parsed.scheme != "https":
        return False

    host = (parsed.hostname or "").lower()
    if host == SHORT_HOST:
        return bool(parsed.path.strip("/"))
    if host not in YOUTUBE_HOSTS:
        return False

    query = parse_qs(parsed.query)
    is_playlist = "list" in query
    is_video = "v" in query or parsed.path.startswith("/watch")
    return is_playlist or is_video


def ensure_playlist_url(url: str) -> str:
    """Return the stripped URL, or raise ValidationError."""
    if not validate_playlist_url(url):
        raise ValidationError(
            "Invalid YouTube URL. Please provide a valid YouTube playlist or video URL.",
            field="playlist_url",
            value=url,
            suggestion="Example: https://www.youtube.com/playlist?list=PL...",
        )
    return url.strip()


def _is_https_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme == "https" and bool(parsed.hostname)


def validate_endpoint(endpoint: str) -> bool:
    """Check an S3-compatible API endpoint, e.g. ``https://<id>.r2.cloudflarestorage.com``."""
    return _is_https_url(endpoint)


def validate_public_url(public_url: str) -> bool:
    """Check the public base URL that published objects are served from."""
    return _is_https_url(public_url)


def validate_bucket_name(bucket_name: str) -> bool:
    """Check S3 bucket naming rules (3-63 chars, lowercase, digits, hyphens)."""
    return (
        3 <= len(bucket_name) <= 63
        and bool(_BUCKET_NAME.match(bucket_name))
        and ".." not in bucket_name
    )
