"""Timezone-aware datetime helpers."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_upload_date(value: str | None) -> datetime | None:
    """Parse a yt-dlp ``upload_date`` (``YYYYMMDD``) or an ISO 8601 string.

    Returns None for missing or unparseable values.
    """
    if not value:
        return None

    value = value.strip()
    try:
        if len(value) == 8 and value.isdigit():
            return datetime.strptime(value, "%Y%m%d").replace(tzinfo=timezone.utc)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
