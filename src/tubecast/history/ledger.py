"""Append-only, size-capped ledger of completed conversions.

The ledger is a JSON array stored newest first. It assumes a single writer:
``add_entry`` reads, prepends and rewrites the file without locking.
"""

import json
import logging
import secrets
import time
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from tubecast.history.models import HistoryEntry
from tubecast.utils.datetime import now_utc
from tubecast.utils.paths import get_history_file

logger = logging.getLogger(__name__)

MAX_ENTRIES = 100


def generate_entry_id() -> str:
    """Unique, roughly time-ordered id such as ``podcast-1718000000000-k3j9x0a1b``."""
    return f"podcast-{int(time.time() * 1000)}-{secrets.token_hex(5)[:9]}"


class HistoryLedger:
    """Reads and appends conversion history.

    Example:
        >>> ledger = HistoryLedger(tmp_path / "history.json")
        >>> entry = ledger.add_entry(
        ...     playlist_url="https://www.youtube.com/playlist?list=PL1",
        ...     playlist_title="Talks",
        ...     channel_name="Channel",
        ...     feed_url="https://pub.example.dev/podcasts/talks/feed.xml",
        ...     episode_count=3,
        ... )
        >>> ledger.recent(1)[0].id == entry.id
        True
    """

    def __init__(self, history_path: Path | None = None, max_entries: int = MAX_ENTRIES) -> None:
        self.history_path = history_path or get_history_file()
        self.max_entries = max_entries

    def load_history(self) -> list[HistoryEntry]:
        """Return all entries, newest first.

        A missing file is an empty history. An unreadable file is moved aside
        to ``<name>.corrupt`` and also treated as empty.
        """
        if not self.history_path.exists():
            return []

        try:
            data = json.loads(self.history_path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                raise ValueError("history file is not a JSON array")
            return [HistoryEntry(**item) for item in data]
        except (json.JSONDecodeError, ValueError, TypeError, PydanticValidationError) as e:
            backup = self.history_path.with_name(self.history_path.name + ".corrupt")
            logger.warning("History file %s is unreadable (%s); moved to %s", self.history_path, e, backup)
            self.history_path.replace(backup)
            return []

    def add_entry(
        self,
        playlist_url: str,
        playlist_title: str,
        channel_name: str,
        feed_url: str,
        episode_count: int,
    ) -> HistoryEntry:
        """Prepend a new entry and trim the ledger to ``max_entries``.

        Returns:
            The committed entry, with generated id and timestamp
        """
        entry = HistoryEntry(
            id=generate_entry_id(),
            playlist_url=playlist_url,
            playlist_title=playlist_title,
            channel_name=channel_name,
            feed_url=feed_url,
            created_at=now_utc(),
            episode_count=episode_count,
        )

        history = [entry, *self.load_history()][: self.max_entries]
        self._write(history)
        logger.debug("Recorded history entry %s", entry.id)
        return entry

    def _write(self, history: list[HistoryEntry]) -> None:
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        payload = [entry.model_dump(mode="json") for entry in history]

        temp_file = self.history_path.with_suffix(".tmp")
        try:
            with temp_file.open("w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            temp_file.replace(self.history_path)
        except OSError:
            temp_file.unlink(missing_ok=True)
            raise

    def recent(self, limit: int = 10) -> list[HistoryEntry]:
        return self.load_history()[:limit]

    def search(self, query: str) -> list[HistoryEntry]:
        """Case-insensitive match on title, channel or playlist URL."""
        needle = query.lower()
        return [
            entry
            for entry in self.load_history()
            if needle in entry.playlist_title.lower()
            or needle in entry.channel_name.lower()
            or needle in entry.playlist_url.lower()
        ]

    def find_by_playlist_url(self, playlist_url: str) -> HistoryEntry | None:
        """Most recent entry for ``playlist_url``, if any."""
        return next(
            (entry for entry in self.load_history() if entry.playlist_url == playlist_url),
            None,
        )
