"""Best-effort JSON-lines log of failed runs."""

import json
import logging
import traceback
from pathlib import Path
from typing import Any

import aiofiles

from tubecast.utils.datetime import now_utc
from tubecast.utils.paths import get_error_log_file

logger = logging.getLogger(__name__)


class ErrorLog:
    """Appends one JSON object per failure to ``errors.log``.

    Writing never raises: if the log cannot be written, the entry is sent to
    the console logger instead.
    """

    def __init__(self, log_path: Path | None = None) -> None:
        self.log_path = log_path or get_error_log_file()

    @staticmethod
    def build_entry(error: BaseException, context: dict[str, Any]) -> dict[str, Any]:
        return {
            "timestamp": now_utc().isoformat(),
            "error": {
                "name": type(error).__name__,
                "message": str(error),
                "traceback": "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
            },
            "context": context,
        }

    async def log_error(self, error: BaseException, context: dict[str, Any]) -> None:
        """Record ``error`` with its context (playlist URL, stage, ...)."""
        entry = self.build_entry(error, context)
        line = json.dumps(entry, default=str) + "\n"

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.log_path, "a", encoding="utf-8") as f:
                await f.write(line)
        except OSError as write_error:
            logger.error("Failed to write to error log %s: %s", self.log_path, write_error)
            logger.error("Original error: %s", line.strip())

    def recent_errors(self, count: int = 10) -> list[dict[str, Any]]:
        """Last ``count`` entries, oldest first. Corrupt lines are skipped."""
        if count <= 0 or not self.log_path.exists():
            return []

        entries = []
        for line in self.log_path.read_text(encoding="utf-8").splitlines()[-count:]:
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError:
                continue
        return entries
