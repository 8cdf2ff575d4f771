"""Helpers for fitting values into terminal tables."""


def truncate_text(text: str, max_length: int = 60) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def truncate_url(url: str, max_length: int = 60) -> str:
    """Shorten a URL, keeping its beginning and its tail visible."""
    if len(url) <= max_length:
        return url
    keep = max_length - 3
    head = keep // 2
    tail = keep - head
    return f"{url[:head]}...{url[-tail:]}"


def mask_secret(value: str, visible: int = 4) -> str:
    """Replace all but the last few characters of a secret with asterisks."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
